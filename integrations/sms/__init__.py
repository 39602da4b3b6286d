"""SMS dispatch for reservation confirmations."""

from .base import NullSmsProvider, SmsProvider, SmsResult
from .dispatcher import (
    SmsDispatcher,
    build_sms_provider,
    clean_phone,
    format_confirmation_message,
)
from .twilio_provider import TwilioSmsProvider, to_e164

__all__ = [
    "NullSmsProvider",
    "SmsDispatcher",
    "SmsProvider",
    "SmsResult",
    "TwilioSmsProvider",
    "build_sms_provider",
    "clean_phone",
    "format_confirmation_message",
    "to_e164",
]
