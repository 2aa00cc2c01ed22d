from twilio.rest import Client
from twilio.base.exceptions import TwilioRestException
import asyncio
import logging
import re
from typing import Optional
from config import settings

logger = logging.getLogger(__name__)


class TwilioService:
    """SMS mirror for booking notifications; a no-op without credentials."""

    def __init__(self, account_sid: Optional[str] = None, auth_token: Optional[str] = None,
                 from_number: Optional[str] = None):
        self.account_sid = account_sid or settings.TWILIO_ACCOUNT_SID
        self.auth_token = auth_token or settings.TWILIO_AUTH_TOKEN
        self.from_number = from_number or settings.TWILIO_FROM_NUMBER

        self.client = None
        if all([self.account_sid, self.auth_token, self.from_number]):
            self.client = Client(self.account_sid, self.auth_token)
        else:
            logger.info("Twilio credentials missing, SMS mirror disabled")

    @property
    def enabled(self) -> bool:
        return self.client is not None

    def _format_phone_number(self, phone_number: str) -> str:
        """Format a Romanian phone number to E.164."""
        digits = re.sub(r'\D', '', phone_number)

        if digits.startswith('0'):
            digits = '40' + digits[1:]  # Replace 0 with Romania country code

        return '+' + digits

    async def send_sms(self, to_number: str, message: str) -> bool:
        if not self.enabled or not to_number:
            return False
        try:
            formatted_number = self._format_phone_number(to_number)
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(
                None,
                lambda: self.client.messages.create(body=message, from_=self.from_number, to=formatted_number)
            )
            logger.info(f"SMS sent to {formatted_number}")
            return True
        except TwilioRestException as e:
            logger.error(f"Twilio error sending SMS to {to_number}: {e}")
            return False
        except Exception as e:
            logger.error(f"Unexpected error sending SMS to {to_number}: {e}", exc_info=True)
            return False


twilio_service = TwilioService()
