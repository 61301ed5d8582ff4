"""Unit tests for discrepancy notification services"""

import httpx
import pytest
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

from src.adapter.services.notification_service import (
    CompositeNotificationService,
    LoggingNotificationService,
    WebhookNotificationService,
    create_notification_service,
)
from src.app.use_cases.ledger.dtos import LedgerDiscrepancyDTO


@pytest.fixture
def discrepancies():
    return [
        LedgerDiscrepancyDTO(
            account_id="acct_alice",
            ledger_id=1,
            ledger_balance=Decimal("10"),
            calculated_balance=Decimal("8"),
            discrepancy=Decimal("2"),
        )
    ]


def _mock_client(post):
    client = MagicMock()
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=False)
    client.post = post
    return client


@pytest.mark.asyncio
class TestNotificationServices:

    async def test_logging_service_always_succeeds(self, discrepancies):
        assert await LoggingNotificationService().send_discrepancy_alert(discrepancies) is True

    @patch("src.adapter.services.notification_service.httpx.AsyncClient")
    async def test_webhook_posts_payload(self, mock_client_class, discrepancies):
        response = MagicMock()
        response.raise_for_status = MagicMock()
        post = AsyncMock(return_value=response)
        mock_client_class.return_value = _mock_client(post)

        sent = await WebhookNotificationService("https://hooks.example.com/ledger").send_discrepancy_alert(discrepancies)

        assert sent is True
        payload = post.call_args.kwargs["json"]
        assert payload["type"] == "ledger_discrepancy_alert"
        assert payload["discrepancies"][0]["account_id"] == "acct_alice"
        assert payload["discrepancies"][0]["discrepancy"] == "2"

    @patch("src.adapter.services.notification_service.httpx.AsyncClient")
    async def test_webhook_failure_returns_false(self, mock_client_class, discrepancies):
        post = AsyncMock(side_effect=httpx.ConnectError("refused"))
        mock_client_class.return_value = _mock_client(post)

        sent = await WebhookNotificationService("https://hooks.example.com/ledger").send_discrepancy_alert(discrepancies)

        assert sent is False

    async def test_composite_succeeds_if_any_channel_succeeds(self, discrepancies):
        failing = MagicMock()
        failing.send_discrepancy_alert = AsyncMock(side_effect=Exception("down"))
        service = CompositeNotificationService([failing, LoggingNotificationService()])

        assert await service.send_discrepancy_alert(discrepancies) is True


class TestNotificationServiceFactory:

    def test_factory_without_webhook_returns_logging(self):
        assert isinstance(create_notification_service(None), LoggingNotificationService)

    def test_factory_with_webhook_returns_composite(self):
        service = create_notification_service("https://hooks.example.com/ledger")

        assert isinstance(service, CompositeNotificationService)
        assert len(service.services) == 2
