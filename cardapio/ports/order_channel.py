from abc import ABC, abstractmethod

from cardapio.core.menu.models import Restaurant


class OrderChannelError(Exception):
    """Falha ao entregar o pedido ao canal externo."""


class OrderChannelPort(ABC):
    @abstractmethod
    def send(self, restaurant: Restaurant, message: str) -> str:
        """Entrega a mensagem do pedido e devolve uma referência (URL ou id)."""
        pass
