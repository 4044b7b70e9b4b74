import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from cardapio.app.admin import router as admin_router
from cardapio.app.cart_routes import router as cart_router
from cardapio.app.menu_routes import router as menu_router
from cardapio.core.cart import CartRegistry
from cardapio.core.menu.loader import load_menu
from cardapio.infra.catalog_repo import CatalogRepository
from cardapio.infra.db import init_db
from cardapio.infra.logs import setup_logging
from cardapio.infra.settings import is_dev, settings

log = logging.getLogger("cardapio.app")

app = FastAPI(title="Cardápio API", docs_url="/docs" if is_dev() else None, redoc_url=None)
app.state.carts = CartRegistry(ttl=settings.CART_TTL_MINUTES * 60)

@app.on_event("startup")
def _init_db():
    init_db()
    setup_logging(to_db=settings.LOG_TO_DB)
    if settings.SEED_FILE:
        data = load_menu(settings.SEED_FILE)
        repo = CatalogRepository()
        if repo.get_restaurant_by_slug(data["restaurant"]["slug"]) is None:
            repo.seed_menu(data)

@app.exception_handler(SQLAlchemyError)
def _catalog_unavailable(request: Request, exc: SQLAlchemyError):
    # falha do banco nunca vira configuração vazia
    log.error(f"catalog unavailable on {request.url.path}", exc_info=exc)
    return JSONResponse(status_code=503, content={"detail": "catálogo indisponível, tente novamente"})

@app.get("/")
def read_root():
    return {"status": "ok", "message": "Cardápio backend ativo"}

@app.get("/healthz")
def health():
    return {"ok": True}

app.include_router(menu_router)
app.include_router(cart_router)
app.include_router(admin_router)
