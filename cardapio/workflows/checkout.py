from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Union
from urllib.parse import quote
import logging
import re

from cardapio.core.cart import Cart, CartLine
from cardapio.core.menu.models import Restaurant
from cardapio.core.pricing import brl, money
from cardapio.ports.order_channel import OrderChannelError, OrderChannelPort

log = logging.getLogger("cardapio.checkout")

WA_ME = "https://wa.me"


class PaymentMethod(str, Enum):
    CARD = "Cartão"
    PIX = "Pix"
    CASH = "Dinheiro"


@dataclass
class CheckoutForm:
    customer_name: str = ""
    payment_method: Optional[str] = None
    address: str = ""


@dataclass
class OrderReceipt:
    message: str
    url: str
    total: Decimal
    reference: str


@dataclass
class SubmissionError:
    problems: List[str]


# -------------------------------------------------
#  Validação
# -------------------------------------------------
def parse_payment(value: Optional[str]) -> Optional[PaymentMethod]:
    if not value:
        return None
    for pm in PaymentMethod:
        if value.strip().lower() in (pm.value.lower(), pm.name.lower()):
            return pm
    return None


def shortfall(cart: Cart, restaurant: Restaurant) -> Decimal:
    """Quanto falta para o pedido mínimo (0 quando já atingiu)."""
    missing = money(restaurant.min_order_value) - cart.total()
    return missing if missing > 0 else Decimal("0.00")


def missing_fields(form: CheckoutForm, restaurant: Restaurant) -> List[str]:
    fields: List[str] = []
    if not (form.customer_name or "").strip():
        fields.append("nome")
    if parse_payment(form.payment_method) is None:
        fields.append("forma de pagamento")
    if restaurant.allows_delivery and not (form.address or "").strip():
        fields.append("endereço de entrega")
    return fields


def checkout_problems(cart: Cart, form: CheckoutForm, restaurant: Restaurant) -> List[str]:
    problems: List[str] = []
    if not restaurant.is_open:
        problems.append("Restaurante fechado no momento.")
    if not re.sub(r"\D", "", restaurant.whatsapp or ""):
        problems.append("Restaurante sem WhatsApp configurado.")
    if cart.is_empty():
        problems.append("Carrinho vazio.")
    fields = missing_fields(form, restaurant)
    if fields:
        problems.append("Preencha: " + ", ".join(fields) + ".")
    gap = shortfall(cart, restaurant)
    if gap > 0:
        problems.append(
            f"Pedido mínimo: {brl(restaurant.min_order_value)}. Faltam {brl(gap)}."
        )
    return problems


# -------------------------------------------------
#  Mensagem
# -------------------------------------------------
def line_text(line: CartLine) -> str:
    head = f"• {line.quantity}x {line.product.name}"
    if line.selected_variations:
        chosen = ", ".join(f"{v.group_name}: {v.option_name}" for v in line.selected_variations)
        head += f" ({chosen})"
    head += f" - {brl(line.total_price)}"
    rows = [head]
    if line.selected_extras:
        rows.append("   + Adicionais: " + ", ".join(e.name for e in line.selected_extras))
    if line.observations:
        rows.append(f"   Obs: {line.observations}")
    return "\n".join(rows)


def build_order_message(cart: Cart, form: CheckoutForm, restaurant: Restaurant) -> str:
    payment = parse_payment(form.payment_method)
    if restaurant.allows_delivery:
        service = "✅ ENTREGA EM CASA"
        where = f"📍 *Endereço:* {form.address.strip()}"
    else:
        service = "✅ RETIRADA NO LOCAL"
        where = f"📍 *Ponto de Retirada:* {restaurant.address}"

    items = "\n".join(line_text(l) for l in cart.lines)
    return (
        f"*🍕 NOVO PEDIDO - {restaurant.name}*\n\n"
        f"*Itens:*\n{items}\n\n"
        f"💰 *Total:* {brl(cart.total())}\n\n"
        f"*👤 Dados do Cliente:*\n"
        f"• Nome: {form.customer_name.strip()}\n"
        f"• Pagamento: {payment.value if payment else ''}\n"
        f"• Modo: {service}\n"
        f"{where}"
    )


def whatsapp_url(number: str, message: str) -> str:
    digits = re.sub(r"\D", "", number or "")
    return f"{WA_ME}/{digits}?text={quote(message, safe='')}"


# -------------------------------------------------
#  Envio
# -------------------------------------------------
def submit_order(
    cart: Cart,
    form: CheckoutForm,
    restaurant: Restaurant,
    channel: OrderChannelPort,
) -> Union[OrderReceipt, SubmissionError]:
    """Valida, monta a mensagem e entrega ao canal.

    O carrinho só é esvaziado depois que o canal aceitou o pedido.
    """
    problems = checkout_problems(cart, form, restaurant)
    if problems:
        return SubmissionError(problems)

    message = build_order_message(cart, form, restaurant)
    total = cart.total()
    try:
        reference = channel.send(restaurant, message)
    except OrderChannelError as e:
        log.error(f"order hand-off failed for {restaurant.slug}: {e}")
        return SubmissionError([f"Não foi possível enviar o pedido: {e}"])

    log.info(f"order handed off restaurant={restaurant.slug} lines={len(cart.lines)} total={total}")
    cart.clear()
    return OrderReceipt(
        message=message,
        url=whatsapp_url(restaurant.whatsapp, message),
        total=total,
        reference=reference,
    )
