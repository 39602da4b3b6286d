"""
Twilio SMS provider.

The Twilio REST client is blocking, so each send runs in a worker thread.
"""
import asyncio
import logging
import re
from typing import Optional

from twilio.base.exceptions import TwilioRestException
from twilio.rest import Client

from .base import SmsResult


logger = logging.getLogger(__name__)


def to_e164(phone: str, country_code: str) -> str:
    """
    Convert a phone number to E.164.

    Numbers already carrying a ``+`` keep their own country code. National
    numbers lose their trunk prefix ``0`` and get ``country_code`` in front.

    Args:
        phone: Raw phone number, separators allowed
        country_code: Default country calling code without ``+`` (e.g. "82")

    Returns:
        Phone number like "+821012345678"
    """
    digits = re.sub(r"\D", "", phone)
    if phone.strip().startswith("+"):
        return f"+{digits}"
    if digits.startswith("0"):
        digits = digits[1:]
    return f"+{country_code}{digits}"


class TwilioSmsProvider:
    """Sends messages through the Twilio Messages API."""

    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        from_number: str,
        country_code: str = "82",
        client: Optional[Client] = None,
    ):
        self.from_number = from_number
        self.country_code = country_code
        self._client = client or Client(account_sid, auth_token)

    def _send_sync(self, to_number: str, text: str):
        return self._client.messages.create(
            from_=self.from_number,
            to=to_number,
            body=text,
        )

    async def send(self, phone: str, text: str) -> SmsResult:
        to_number = to_e164(phone, self.country_code)
        try:
            message = await asyncio.to_thread(self._send_sync, to_number, text)
        except TwilioRestException as e:
            logger.warning(f"Twilio rejected SMS to {to_number}: {e.msg}")
            return SmsResult(success=False, error=str(e.msg))
        except Exception as e:
            logger.warning(f"SMS transport failed for {to_number}: {e}")
            return SmsResult(success=False, error=str(e))

        if getattr(message, "error_code", None):
            error = getattr(message, "error_message", None) or f"Twilio error {message.error_code}"
            logger.warning(f"Twilio reported failure for {to_number}: {error}")
            return SmsResult(success=False, error=error)

        logger.info(f"SMS queued to {to_number} (sid={message.sid})")
        return SmsResult(
            success=True,
            data={"sid": message.sid, "status": getattr(message, "status", None)},
        )
