import os

class Settings:
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///cardapio.db")

    ADMIN_USER = os.getenv("ADMIN_USER", "admin")
    ADMIN_PASS = os.getenv("ADMIN_PASS", "")

    # MODE: 'dev' ou 'prod' (prod esconde /docs)
    CARDAPIO_MODE = os.getenv("CARDAPIO_MODE", "dev")

    # Logs também na tabela `logs` (painel admin)
    LOG_TO_DB = os.getenv("LOG_TO_DB", "1") == "1"

    # Cardápio-semente carregado no startup (opcional)
    SEED_FILE = os.getenv("CARDAPIO_SEED_FILE", "")

    # Carrinho sem uso por mais que isso é descartado
    CART_TTL_MINUTES = int(os.getenv("CART_TTL_MINUTES", "360"))

    # Canal do pedido: 'link' (wa.me) ou 'twilio' (WhatsApp API)
    ORDER_CHANNEL = os.getenv("ORDER_CHANNEL", "link")
    TWILIO_ACCOUNT_SID = os.getenv("TWILIO_ACCOUNT_SID", "")
    TWILIO_AUTH_TOKEN = os.getenv("TWILIO_AUTH_TOKEN", "")
    TWILIO_WHATSAPP_FROM = os.getenv("TWILIO_WHATSAPP_FROM", "")

    # Gerador de descrições (opcional)
    OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
    DESCRIPTION_MODEL = os.getenv("DESCRIPTION_MODEL", "gpt-4o-mini")

settings = Settings()

def is_dev() -> bool:
    """True quando a aplicação roda em modo de desenvolvimento."""
    return (settings.CARDAPIO_MODE or "dev").lower() == "dev"
