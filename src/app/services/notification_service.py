"""Notification Service Interface

Defines the contract for alerting operators about ledger discrepancies.
"""

from abc import ABC, abstractmethod
from typing import List
from src.app.use_cases.ledger.dtos import LedgerDiscrepancyDTO


class NotificationService(ABC):
    """
    Abstract notification service for sending alerts

    Implementations can send notifications via:
    - Logging
    - Webhook (HTTP POST)
    """

    @abstractmethod
    async def send_discrepancy_alert(self, discrepancies: List[LedgerDiscrepancyDTO]) -> bool:
        """
        Send alert for ledgers whose cached balance disagrees with their history

        Args:
            discrepancies: Discrepancies found by one reconciliation run

        Returns:
            True if notification sent successfully, False otherwise
        """
        pass
