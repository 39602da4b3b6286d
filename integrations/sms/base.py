"""Provider contract for outbound SMS."""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol


logger = logging.getLogger(__name__)


@dataclass
class SmsResult:
    """Outcome of one send attempt."""

    success: bool
    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"success": self.success, "data": self.data, "error": self.error}


class SmsProvider(Protocol):
    """Anything able to deliver a text message to a phone number."""

    async def send(self, phone: str, text: str) -> SmsResult: ...


class NullSmsProvider:
    """Provider used when no SMS credentials are configured."""

    async def send(self, phone: str, text: str) -> SmsResult:
        logger.warning(f"SMS provider not configured, message to {phone} not sent")
        return SmsResult(success=False, error="SMS provider not configured")
