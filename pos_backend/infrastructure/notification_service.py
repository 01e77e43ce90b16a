import logging
import smtplib
from datetime import timezone
from email.message import EmailMessage

import pytz
from twilio.rest import Client
from pos_backend.core.config import settings as default_settings
from pos_backend.domain.entities import OrderRecord
from pos_backend.domain.pricing import round_money
from pos_backend.interfaces.INotifier import INotifier

logger = logging.getLogger(__name__)


def _whatsapp(number: str) -> str:
    return number if number.startswith("whatsapp:") else f"whatsapp:{number}"


class NotificationService(INotifier):
    """
    Customer receipts by e-mail and operator alerts over WhatsApp.
    Every delivery is best-effort: failures are logged, never raised.
    """

    def __init__(self, settings=default_settings, twilio_client=None):
        self.settings = settings
        self.timezone = pytz.timezone(settings.STORE_TIMEZONE)
        self.client = twilio_client
        self.whatsapp_enabled = twilio_client is not None

        # Only initialize Twilio if credentials exist in .env
        if self.client is None and settings.TWILIO_ACCOUNT_SID and settings.TWILIO_AUTH_TOKEN:
            try:
                self.client = Client(settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN)
                self.whatsapp_enabled = True
                logger.info("NotificationService: Twilio client initialized")
            except Exception as e:
                logger.error(f"Failed to initialize Twilio client: {e}")
        elif self.client is None:
            logger.info("NotificationService: Twilio credentials missing, operator alerts go to the log only")

    # --- Formatting ---

    def _money(self, amount) -> str:
        return f"{self.settings.CURRENCY_SYMBOL}{round_money(amount):,.2f}"

    def format_receipt(self, order: OrderRecord) -> str:
        created = order.created_at
        if created.tzinfo is None:
            created = created.replace(tzinfo=timezone.utc)
        local_time = created.astimezone(self.timezone)

        lines = [
            f"Order {order.id}",
            f"Date: {local_time.strftime('%d %b %Y, %I:%M %p')}",
            "",
        ]
        for item in order.items:
            lines.append(f"{item.quantity} x {item.name or item.product_id} @ {self._money(item.unit_price)}")
        lines += [
            "",
            f"Subtotal: {self._money(order.subtotal)}",
            f"Discount: -{self._money(order.discount)}",
            f"GST: {self._money(order.tax)}",
            f"Total: {self._money(order.total)}",
            f"Paid by: {order.payment_method.upper()} ({order.transaction_id})",
        ]
        return "\n".join(lines)

    # --- Channels ---

    def notify(self, email: str, order: OrderRecord) -> None:
        """Sends the order receipt to the customer."""
        if not email:
            logger.info(f"No customer email for order {order.id}, skipping receipt")
            return

        body = self.format_receipt(order)
        if not self.settings.SMTP_HOST:
            logger.info(f"SMTP not configured, receipt for {email}:\n{body}")
            return

        message = EmailMessage()
        message["Subject"] = f"Your receipt for order {order.id}"
        message["From"] = self.settings.SMTP_FROM
        message["To"] = email
        message.set_content(body)

        try:
            with smtplib.SMTP(self.settings.SMTP_HOST, self.settings.SMTP_PORT, timeout=10) as smtp:
                smtp.send_message(message)
            logger.info(f"Receipt for order {order.id} sent to {email}")
        except Exception as e:
            logger.warning(f"Failed to send receipt for order {order.id} to {email}: {e}")

    def alert_operator(self, message: str) -> None:
        """Sends a WhatsApp message to the store admin."""
        if not self.whatsapp_enabled or not self.settings.ADMIN_PHONE_NUMBER or not self.settings.TWILIO_FROM_NUMBER:
            logger.warning(f"OPERATOR ALERT (not delivered): {message}")
            return

        try:
            self.client.messages.create(
                from_=_whatsapp(self.settings.TWILIO_FROM_NUMBER),
                body=message,
                to=_whatsapp(self.settings.ADMIN_PHONE_NUMBER),
            )
            logger.info(f"Operator alert sent to {self.settings.ADMIN_PHONE_NUMBER}")
        except Exception as e:
            logger.warning(f"Failed to send operator alert: {e}; alert was: {message}")
