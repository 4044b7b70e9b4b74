import logging
import openai
from cardapio.ports.description import DescriptionPort
from cardapio.infra.settings import settings

log = logging.getLogger("cardapio.ai")

MAX_CHARS = 200
UNAVAILABLE = "Serviço de IA não disponível no momento."
FAILED = "Não foi possível gerar a descrição automaticamente."

class OpenAIDescriptionAdapter(DescriptionPort):
    def __init__(self):
        self.enabled = bool(settings.OPENAI_API_KEY)
        if self.enabled:
            openai.api_key = settings.OPENAI_API_KEY

    def generate(self, product_name: str, cuisine: str = "Culinária") -> str:
        if not self.enabled:
            return UNAVAILABLE
        prompt = (
            f'Escreva uma descrição curta, viciante e persuasiva para um prato de cardápio '
            f'chamado "{product_name}" em um restaurante de "{cuisine}". '
            f'Use no máximo {MAX_CHARS} caracteres.'
        )
        try:
            response = openai.chat.completions.create(
                model=settings.DESCRIPTION_MODEL,
                messages=[{"role": "user", "content": prompt}],
            )
        except openai.OpenAIError as e:
            log.error(f"OpenAI description error: {e}")
            return FAILED
        text = (response.choices[0].message.content or "").strip() or FAILED
        return text if len(text) <= MAX_CHARS else text[: MAX_CHARS - 3] + "..."
