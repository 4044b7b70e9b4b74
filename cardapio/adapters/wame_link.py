from cardapio.core.menu.models import Restaurant
from cardapio.ports.order_channel import OrderChannelPort
from cardapio.workflows.checkout import whatsapp_url

class WaMeLinkChannel(OrderChannelPort):
    """Sem rede: o próprio link wa.me é a entrega; o navegador do cliente abre."""

    def send(self, restaurant: Restaurant, message: str) -> str:
        return whatsapp_url(restaurant.whatsapp, message)
