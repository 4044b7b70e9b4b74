from __future__ import annotations
from fastapi import Depends, HTTPException, Request

from cardapio.core.cart import CartRegistry
from cardapio.core.menu.models import Restaurant
from cardapio.infra.catalog_repo import CatalogRepository
from cardapio.infra.settings import settings
from cardapio.ports.description import DescriptionPort
from cardapio.ports.order_channel import OrderChannelPort


def get_repo() -> CatalogRepository:
    return CatalogRepository()


def get_carts(request: Request) -> CartRegistry:
    return request.app.state.carts


def get_channel() -> OrderChannelPort:
    if settings.ORDER_CHANNEL == "twilio":
        from cardapio.adapters.twilio_whatsapp import TwilioWhatsAppChannel
        return TwilioWhatsAppChannel()
    from cardapio.adapters.wame_link import WaMeLinkChannel
    return WaMeLinkChannel()


def get_describer() -> DescriptionPort:
    from cardapio.adapters.openai_description import OpenAIDescriptionAdapter
    return OpenAIDescriptionAdapter()


def get_restaurant(slug: str, repo: CatalogRepository = Depends(get_repo)) -> Restaurant:
    rest = repo.get_restaurant_by_slug(slug)
    if rest is None:
        raise HTTPException(status_code=404, detail="restaurante não encontrado")
    return rest
