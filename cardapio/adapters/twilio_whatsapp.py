import logging
import re
from typing import Optional

from twilio.base.exceptions import TwilioRestException
from twilio.rest import Client

from cardapio.core.menu.models import Restaurant
from cardapio.infra.settings import settings
from cardapio.ports.order_channel import OrderChannelError, OrderChannelPort

log = logging.getLogger("cardapio.twilio")

def _wa(number: str) -> str:
    digits = re.sub(r"\D", "", number or "")
    return f"whatsapp:+{digits}"

class TwilioWhatsAppChannel(OrderChannelPort):
    def __init__(self, client: Optional[Client] = None, from_number: Optional[str] = None):
        self.client = client or Client(settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN)
        self.from_number = from_number or settings.TWILIO_WHATSAPP_FROM

    def send(self, restaurant: Restaurant, message: str) -> str:
        if not self.from_number:
            raise OrderChannelError("TWILIO_WHATSAPP_FROM não configurado")
        try:
            msg = self.client.messages.create(
                from_=_wa(self.from_number),
                to=_wa(restaurant.whatsapp),
                body=message,
            )
        except TwilioRestException as e:
            log.error(f"Twilio WhatsApp error: {e}")
            raise OrderChannelError(str(e.msg or e)) from e
        log.info(f"Twilio WhatsApp message queued sid={msg.sid}")
        return msg.sid
