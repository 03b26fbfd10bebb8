"""
WhatsApp notifier
Sends booking lifecycle messages to the administrative WhatsApp number
through the Twilio Messages API. Delivery is best-effort: failures are
logged and never raised to the caller.
"""

import logging
from typing import Optional

import httpx

from ..core.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


def _whatsapp_address(number: str) -> str:
    return number if number.startswith("whatsapp:") else f"whatsapp:{number}"


class WhatsAppNotifier:
    def __init__(
        self,
        config: Settings = default_settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self.transport = transport

    @property
    def enabled(self) -> bool:
        return self.config.notifier_configured

    async def send(self, message: str) -> bool:
        """
        Send ``message`` to the admin channel.

        Returns:
            True when Twilio accepted the message, False otherwise
        """
        if not self.enabled:
            logger.warning("WhatsApp notifier not configured; message not sent")
            return False

        account_sid = self.config.TWILIO_ACCOUNT_SID
        data = {
            "From": _whatsapp_address(self.config.TWILIO_WHATSAPP_FROM),
            "To": _whatsapp_address(self.config.ADMIN_WHATSAPP_TO),
            "Body": message,
        }

        try:
            async with httpx.AsyncClient(
                timeout=self.config.NOTIFIER_TIMEOUT_SECONDS,
                transport=self.transport,
            ) as client:
                response = await client.post(
                    f"{self.config.TWILIO_API_BASE_URL}/Accounts/{account_sid}/Messages.json",
                    auth=(account_sid, self.config.TWILIO_AUTH_TOKEN),
                    data=data,
                )
        except httpx.HTTPError as e:
            logger.error(f"Failed to send WhatsApp message: {e}")
            return False

        if response.status_code not in (200, 201):
            logger.error(
                f"Twilio rejected WhatsApp message: {response.status_code} - {response.text}"
            )
            return False

        logger.info(f"WhatsApp message accepted by Twilio ({response.status_code})")
        return True
