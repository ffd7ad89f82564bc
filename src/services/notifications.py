"""New-order notification dispatch.

Notifications are best-effort: they are scheduled as background tasks after the
order is committed, never awaited by the request, never retried, and their
failures are logged and dropped.
"""

import asyncio
import json
import logging
from dataclasses import asdict, dataclass
from typing import Optional, Set

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from src.core.settings import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()


@dataclass
class OrderSummary:
    """Data a seller needs to act on a new order."""
    tenant_email: str
    tenant_name: str
    order_number: str
    customer_name: str
    customer_phone: str
    customer_address: str
    product_name: str
    quantity: int
    subtotal: str
    shipping_fee: str
    total: str
    shipping_location: str
    variant_name: Optional[str] = None

    @property
    def subject(self) -> str:
        return f"New Order #{self.order_number} - {self.product_name}"

    def render_text(self) -> str:
        product = self.product_name if not self.variant_name else f"{self.product_name} ({self.variant_name})"
        return "\n".join([
            f"Hello {self.tenant_name},",
            "",
            f"You have received a new order #{self.order_number}.",
            "",
            f"Product: {product}",
            f"Quantity: {self.quantity}",
            f"Subtotal: {self.subtotal}",
            f"Shipping ({self.shipping_location}): {self.shipping_fee}",
            f"Total (COD): {self.total}",
            "",
            f"Customer: {self.customer_name}",
            f"Phone: {self.customer_phone}",
            f"Address: {self.customer_address}",
            "",
            "Please confirm and process this order from your dashboard.",
            "",
            f"This email was sent by {settings.platform_name}",
        ])


class NotificationDispatcher:
    """Sends seller notifications through SES or, in development, the log."""

    def __init__(self, backend: Optional[str] = None):
        self.backend = backend or settings.notification_backend
        self.ses_client = None
        self._pending: Set[asyncio.Task] = set()

        if self.backend == "ses":
            self._initialize_ses()

    def _initialize_ses(self):
        """Initialize SES client."""
        try:
            self.ses_client = boto3.client(
                "ses",
                region_name=settings.aws_region,
                aws_access_key_id=settings.aws_access_key_id,
                aws_secret_access_key=settings.aws_secret_access_key,
            )
            logger.info("SES client initialized for order notifications")
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to initialize SES client: {e}")
            self.ses_client = None

    def notify_new_order(self, summary: OrderSummary) -> Optional[asyncio.Task]:
        """Schedule a new-order notification and return immediately."""
        try:
            task = asyncio.get_running_loop().create_task(self.send_new_order(summary))
        except RuntimeError as e:
            logger.error(f"Cannot schedule notification for order {summary.order_number}: {e}")
            return None
        # Hold a reference until done so the task is not garbage collected
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def send_new_order(self, summary: OrderSummary) -> bool:
        """Deliver one notification. Never raises."""
        try:
            if self.backend == "ses":
                return await self._send_ses(summary)
            return await self._send_mock(summary)
        except Exception as e:
            logger.error(f"Failed to send notification for order {summary.order_number}: {e}")
            return False

    async def _send_ses(self, summary: OrderSummary) -> bool:
        if not self.ses_client:
            logger.warning("SES not properly configured, skipping order notification")
            return False

        try:
            response = await asyncio.to_thread(
                self.ses_client.send_email,
                Source=settings.notification_sender,
                Destination={"ToAddresses": [summary.tenant_email]},
                Message={
                    "Subject": {"Data": summary.subject, "Charset": "UTF-8"},
                    "Body": {"Text": {"Data": summary.render_text(), "Charset": "UTF-8"}},
                },
            )
            logger.info(f"Order notification {summary.order_number} sent: {response['MessageId']}")
            return True
        except (BotoCoreError, ClientError) as e:
            logger.error(f"SES error sending order notification {summary.order_number}: {e}")
            return False

    async def _send_mock(self, summary: OrderSummary) -> bool:
        """Mock delivery for development."""
        logger.info(f"MOCK NOTIFICATION: {summary.subject} -> {summary.tenant_email}")
        logger.debug(f"Notification data: {json.dumps(asdict(summary), indent=2)}")
        return True

    async def drain(self) -> None:
        """Wait for scheduled notifications (used at shutdown and in tests)."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)


# Global dispatcher instance
_dispatcher = None


def get_notification_dispatcher() -> NotificationDispatcher:
    """Get the global notification dispatcher instance."""
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = NotificationDispatcher()
    return _dispatcher
