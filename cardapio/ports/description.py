from abc import ABC, abstractmethod

class DescriptionPort(ABC):
    @abstractmethod
    def generate(self, product_name: str, cuisine: str = "Culinária") -> str:
        """Gera uma descrição curta de cardápio para o produto."""
        pass
