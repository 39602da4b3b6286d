"""
Confirmation SMS dispatch.

Sending is best-effort: every failure is turned into an unsuccessful
``SmsResult`` and nothing here raises.
"""
import logging
import re
from typing import Optional

from core.config import Settings, settings as default_settings
from core.utils_datetime import to_date_key
from domain.enums import ServiceType, UNDETERMINED_TIME
from domain.models import DisplayReservation

from .base import NullSmsProvider, SmsProvider, SmsResult
from .twilio_provider import TwilioSmsProvider


logger = logging.getLogger(__name__)


def clean_phone(phone: Optional[str]) -> str:
    """Strip every non-digit character."""
    return re.sub(r"\D", "", phone or "")


def format_confirmation_message(record: DisplayReservation, shop_name: str) -> str:
    """Confirmation text sent when a reservation becomes confirmed."""
    service = ServiceType(record.service)
    date_key = to_date_key(record.effective_date) or ""
    time = record.time or UNDETERMINED_TIME
    return (
        f"[{shop_name}] {record.owner_name}님의 {record.pet_name} {service.label} "
        f"예약이 확정되었습니다. 일시: {date_key} {time}."
    )


class SmsDispatcher:
    """Formats and sends confirmation messages through a provider."""

    def __init__(self, provider: SmsProvider, shop_name: str):
        self.provider = provider
        self.shop_name = shop_name

    async def send_confirmation(self, record: DisplayReservation) -> SmsResult:
        phone = clean_phone(record.phone)
        if not phone:
            logger.warning(f"No phone number on reservation {record.id}, SMS skipped")
            return SmsResult(success=False, error="No phone number")

        text = format_confirmation_message(record, self.shop_name)
        try:
            result = await self.provider.send(phone, text)
        except Exception as e:
            logger.warning(f"SMS provider raised for reservation {record.id}: {e}")
            return SmsResult(success=False, error=str(e))

        if not result.success:
            logger.warning(f"Confirmation SMS failed for reservation {record.id}: {result.error}")
        return result


def build_sms_provider(config: Optional[Settings] = None) -> SmsProvider:
    """Twilio when credentials are configured, otherwise the null provider."""
    config = config or default_settings
    if not config.twilio_configured:
        logger.info("Twilio credentials missing, confirmation SMS disabled")
        return NullSmsProvider()
    return TwilioSmsProvider(
        account_sid=config.twilio_account_sid,
        auth_token=config.twilio_auth_token,
        from_number=config.twilio_phone_number,
        country_code=config.sms_default_country_code,
    )
