"""Notification Service Implementations

Delivers ledger discrepancy alerts raised by the reconciliation worker.
"""

import logging
from typing import List, Optional
import httpx
from src.app.services.notification_service import NotificationService
from src.app.use_cases.ledger.dtos import LedgerDiscrepancyDTO

logger = logging.getLogger(__name__)


class LoggingNotificationService(NotificationService):
    """
    Notification service that logs alerts

    Used on its own in development and as the first channel otherwise.
    """

    async def send_discrepancy_alert(self, discrepancies: List[LedgerDiscrepancyDTO]) -> bool:
        for d in discrepancies:
            logger.warning(
                f"[LEDGER DISCREPANCY] Account: {d.account_id}, "
                f"Ledger: {d.ledger_id}, "
                f"Balance: {d.ledger_balance}, "
                f"Transaction sum: {d.calculated_balance}, "
                f"Difference: {d.discrepancy}, "
                f"Repaired: {d.repaired}"
            )
        return True


class WebhookNotificationService(NotificationService):
    """
    Notification service that POSTs alerts as JSON to a webhook URL
    """

    def __init__(self, webhook_url: str, timeout: float = 10.0):
        self.webhook_url = webhook_url
        self.timeout = timeout

    async def send_discrepancy_alert(self, discrepancies: List[LedgerDiscrepancyDTO]) -> bool:
        """
        Send discrepancy alert via webhook

        Returns:
            True if webhook call succeeded, False otherwise
        """
        payload = {
            "type": "ledger_discrepancy_alert",
            "count": len(discrepancies),
            "discrepancies": [
                {
                    "account_id": d.account_id,
                    "ledger_id": d.ledger_id,
                    "ledger_balance": str(d.ledger_balance),
                    "calculated_balance": str(d.calculated_balance),
                    "discrepancy": str(d.discrepancy),
                    "repaired": d.repaired,
                }
                for d in discrepancies
            ],
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    self.webhook_url,
                    json=payload,
                    headers={"Content-Type": "application/json"},
                )
                response.raise_for_status()
                logger.info(
                    f"Webhook notification sent for {len(discrepancies)} discrepancies to {self.webhook_url}"
                )
                return True
        except httpx.HTTPError as e:
            logger.error(f"Failed to send discrepancy webhook notification: {e}")
            return False


class CompositeNotificationService(NotificationService):
    """
    Notification service that delegates to multiple services

    Succeeds when at least one channel succeeds.
    """

    def __init__(self, services: List[NotificationService]):
        self.services = services

    async def send_discrepancy_alert(self, discrepancies: List[LedgerDiscrepancyDTO]) -> bool:
        success = False
        for service in self.services:
            try:
                if await service.send_discrepancy_alert(discrepancies):
                    success = True
            except Exception as e:
                logger.error(f"Notification service {type(service).__name__} failed: {e}")
        return success


def create_notification_service(webhook_url: Optional[str] = None) -> NotificationService:
    """
    Factory function to create appropriate notification service

    Args:
        webhook_url: Optional webhook URL. If provided, creates composite
                     service with logging + webhook. Otherwise, just logging.

    Returns:
        Configured NotificationService
    """
    services: List[NotificationService] = [LoggingNotificationService()]

    if webhook_url:
        services.append(WebhookNotificationService(webhook_url))

    if len(services) == 1:
        return services[0]

    return CompositeNotificationService(services)
