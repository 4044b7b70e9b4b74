from __future__ import annotations
from decimal import Decimal
from typing import Any, Dict, List, Optional
import html
import logging
import secrets

from fastapi import APIRouter, Body, Depends, HTTPException, Request, status
from fastapi.responses import HTMLResponse
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from pydantic import BaseModel, Field

from cardapio.app.deps import get_describer, get_repo
from cardapio.app.menu_routes import group_out, product_out, restaurant_out
from cardapio.core.menu.loader import check_menu
from cardapio.core.menu.validator import validate_group
from cardapio.infra.catalog_repo import CatalogRepository
from cardapio.infra.logs import get_events
from cardapio.infra.settings import settings
from cardapio.ports.description import DescriptionPort

router = APIRouter()
admin = APIRouter(prefix="/admin", tags=["admin"])
security = HTTPBasic()
log = logging.getLogger("cardapio.admin")


def require_admin(credentials: HTTPBasicCredentials = Depends(security)):
    ok_user = secrets.compare_digest(credentials.username, settings.ADMIN_USER)
    ok_pass = secrets.compare_digest(credentials.password, settings.ADMIN_PASS)
    if not (settings.ADMIN_PASS and ok_user and ok_pass):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Basic"},
        )


def esc(v):
    return html.escape("" if v is None else str(v), quote=True)


# -------- payloads --------

class RestaurantIn(BaseModel):
    name: str
    slug: str
    whatsapp: str = ""
    address: str = ""
    is_open: bool = True
    min_order_value: Decimal = Field(Decimal("0"), ge=0)
    allows_delivery: bool = False
    description: str = ""
    contact_phone: str = ""


class RestaurantPatch(BaseModel):
    name: Optional[str] = None
    whatsapp: Optional[str] = None
    address: Optional[str] = None
    is_open: Optional[bool] = None
    min_order_value: Optional[Decimal] = Field(None, ge=0)
    allows_delivery: Optional[bool] = None
    description: Optional[str] = None
    contact_phone: Optional[str] = None


class CategoryIn(BaseModel):
    name: str
    order: int = 0


class CategoryPatch(BaseModel):
    name: Optional[str] = None
    order: Optional[int] = None


class ProductIn(BaseModel):
    name: str
    price: Decimal = Field(..., ge=0)
    category_id: Optional[str] = None
    description: str = ""
    image: str = ""
    is_available: bool = True
    is_promotion: bool = False
    allows_observations: bool = True


class ProductPatch(BaseModel):
    name: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0)
    category_id: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    is_available: Optional[bool] = None
    is_promotion: Optional[bool] = None
    allows_observations: Optional[bool] = None


class ExtraIn(BaseModel):
    name: str
    price: Decimal = Field(..., ge=0)
    is_available: bool = True


class GroupIn(BaseModel):
    name: str
    is_required: bool = False
    allow_multiple: bool = False
    max_selections: int = Field(1, ge=1)
    display_order: int = 0


class OptionIn(BaseModel):
    name: str
    price_adjustment: Decimal = Decimal("0")
    is_default: bool = False
    is_available: bool = True
    display_order: int = 0


class AssignIn(BaseModel):
    template_id: str
    display_order: int = 0


class DescribeIn(BaseModel):
    product_name: str
    cuisine: str = "Culinária"


def _product_or_404(repo: CatalogRepository, product_id: str):
    p = repo.get_product(product_id)
    if p is None:
        raise HTTPException(status_code=404, detail="produto não encontrado")
    return p


def _check_group(payload: GroupIn, where: str) -> None:
    errors = validate_group(payload.model_dump(), where)
    if errors:
        raise HTTPException(status_code=400, detail=errors)


# -------- restaurante / categorias --------

@admin.post("/restaurants", status_code=201)
def create_restaurant(payload: RestaurantIn, repo: CatalogRepository = Depends(get_repo)):
    if repo.get_restaurant_by_slug(payload.slug):
        raise HTTPException(status_code=409, detail="slug já existe")
    data = payload.model_dump()
    rest = repo.create_restaurant(data.pop("name"), data.pop("slug"), **data)
    log.info(f"restaurant created {rest.slug}")
    return restaurant_out(rest)


@admin.patch("/restaurants/{restaurant_id}")
def update_restaurant(restaurant_id: str, payload: RestaurantPatch, repo: CatalogRepository = Depends(get_repo)):
    rest = repo.update_restaurant(restaurant_id, **payload.model_dump(exclude_none=True))
    if rest is None:
        raise HTTPException(status_code=404, detail="restaurante não encontrado")
    return restaurant_out(rest)


@admin.post("/restaurants/{restaurant_id}/categories", status_code=201)
def create_category(restaurant_id: str, payload: CategoryIn, repo: CatalogRepository = Depends(get_repo)):
    if repo.get_restaurant(restaurant_id) is None:
        raise HTTPException(status_code=404, detail="restaurante não encontrado")
    c = repo.create_category(restaurant_id, payload.name, payload.order)
    return {"id": c.id, "name": c.name, "order": c.order}


@admin.get("/restaurants/{restaurant_id}/categories")
def list_categories(restaurant_id: str, repo: CatalogRepository = Depends(get_repo)):
    if repo.get_restaurant(restaurant_id) is None:
        raise HTTPException(status_code=404, detail="restaurante não encontrado")
    return [{"id": c.id, "name": c.name, "order": c.order} for c in repo.list_categories(restaurant_id)]


@admin.patch("/categories/{category_id}")
def update_category(category_id: str, payload: CategoryPatch, repo: CatalogRepository = Depends(get_repo)):
    c = repo.update_category(category_id, payload.name, payload.order)
    if c is None:
        raise HTTPException(status_code=404, detail="categoria não encontrada")
    return {"id": c.id, "name": c.name, "order": c.order}


@admin.delete("/categories/{category_id}")
def delete_category(category_id: str, repo: CatalogRepository = Depends(get_repo)):
    if not repo.delete_category(category_id):
        raise HTTPException(status_code=404, detail="categoria não encontrada")
    return {"ok": True}


# -------- produtos / adicionais --------

@admin.post("/restaurants/{restaurant_id}/products", status_code=201)
def create_product(restaurant_id: str, payload: ProductIn, repo: CatalogRepository = Depends(get_repo)):
    if repo.get_restaurant(restaurant_id) is None:
        raise HTTPException(status_code=404, detail="restaurante não encontrado")
    data = payload.model_dump()
    p = repo.create_product(restaurant_id, data.pop("name"), data.pop("price"), **data)
    return product_out(p)


@admin.patch("/products/{product_id}")
def update_product(product_id: str, payload: ProductPatch, repo: CatalogRepository = Depends(get_repo)):
    _product_or_404(repo, product_id)
    return product_out(repo.update_product(product_id, **payload.model_dump(exclude_none=True)))


@admin.delete("/products/{product_id}")
def delete_product(product_id: str, repo: CatalogRepository = Depends(get_repo)):
    if not repo.delete_product(product_id):
        raise HTTPException(status_code=404, detail="produto não encontrado")
    return {"ok": True}


@admin.post("/products/{product_id}/extras", status_code=201)
def add_extra(product_id: str, payload: ExtraIn, repo: CatalogRepository = Depends(get_repo)):
    _product_or_404(repo, product_id)
    e = repo.add_extra(product_id, payload.name, payload.price, payload.is_available)
    return {"id": e.id, "name": e.name, "price": e.price, "is_available": e.is_available}


@admin.delete("/extras/{extra_id}")
def delete_extra(extra_id: str, repo: CatalogRepository = Depends(get_repo)):
    if not repo.delete_extra(extra_id):
        raise HTTPException(status_code=404, detail="adicional não encontrado")
    return {"ok": True}


# -------- variações próprias --------

@admin.get("/products/{product_id}/variations")
def list_variations(product_id: str, repo: CatalogRepository = Depends(get_repo)):
    p = _product_or_404(repo, product_id)
    return {"product": product_out(p), "variation_groups": [group_out(g) for g in repo.load_variation_groups(p.id)]}


@admin.post("/products/{product_id}/variation-groups", status_code=201)
def add_group(product_id: str, payload: GroupIn, repo: CatalogRepository = Depends(get_repo)):
    _product_or_404(repo, product_id)
    _check_group(payload, "group")
    g = repo.add_group(product_id, **payload.model_dump())
    repo.refresh_price_range(product_id)
    return {"id": g.id, "name": g.name, "max_selections": g.limit}


@admin.delete("/variation-groups/{group_id}")
def delete_group(group_id: str, repo: CatalogRepository = Depends(get_repo)):
    pid = repo.delete_group(group_id)
    if pid is None:
        raise HTTPException(status_code=404, detail="grupo não encontrado")
    repo.refresh_price_range(pid)
    return {"ok": True}


@admin.post("/variation-groups/{group_id}/options", status_code=201)
def add_option(group_id: str, payload: OptionIn, repo: CatalogRepository = Depends(get_repo)):
    pid = repo.add_option(group_id, **payload.model_dump())
    if pid is None:
        raise HTTPException(status_code=404, detail="grupo não encontrado")
    repo.refresh_price_range(pid)
    return product_out(repo.get_product(pid))


@admin.delete("/variation-options/{option_id}")
def delete_option(option_id: str, repo: CatalogRepository = Depends(get_repo)):
    pid = repo.delete_option(option_id)
    if pid is None:
        raise HTTPException(status_code=404, detail="opção não encontrada")
    repo.refresh_price_range(pid)
    return {"ok": True}


# -------- templates --------

@admin.get("/restaurants/{restaurant_id}/templates")
def list_templates(restaurant_id: str, repo: CatalogRepository = Depends(get_repo)):
    return [group_out(t) for t in repo.list_templates(restaurant_id)]


@admin.post("/restaurants/{restaurant_id}/templates", status_code=201)
def create_template(restaurant_id: str, payload: GroupIn, repo: CatalogRepository = Depends(get_repo)):
    if repo.get_restaurant(restaurant_id) is None:
        raise HTTPException(status_code=404, detail="restaurante não encontrado")
    _check_group(payload, "template")
    t = repo.create_template(restaurant_id, **payload.model_dump())
    return {"id": t.id, "name": t.name, "max_selections": t.limit}


@admin.delete("/templates/{template_id}")
def delete_template(template_id: str, repo: CatalogRepository = Depends(get_repo)):
    affected = repo.delete_template(template_id)
    if affected is None:
        raise HTTPException(status_code=404, detail="template não encontrado")
    repo.refresh_many(affected)
    return {"ok": True}


@admin.post("/templates/{template_id}/options", status_code=201)
def add_template_option(template_id: str, payload: OptionIn, repo: CatalogRepository = Depends(get_repo)):
    try:
        affected = repo.add_template_option(template_id, **payload.model_dump())
    except KeyError:
        raise HTTPException(status_code=404, detail="template não encontrado")
    repo.refresh_many(affected)
    return {"ok": True, "products_refreshed": len(set(affected))}


@admin.delete("/template-options/{option_id}")
def delete_template_option(option_id: str, repo: CatalogRepository = Depends(get_repo)):
    affected = repo.delete_template_option(option_id)
    if affected is None:
        raise HTTPException(status_code=404, detail="opção não encontrada")
    repo.refresh_many(affected)
    return {"ok": True}


@admin.post("/products/{product_id}/assignments", status_code=201)
def assign_template(product_id: str, payload: AssignIn, repo: CatalogRepository = Depends(get_repo)):
    _product_or_404(repo, product_id)
    if not repo.assign_template(product_id, payload.template_id, payload.display_order):
        raise HTTPException(status_code=409, detail="template já atribuído")
    repo.refresh_price_range(product_id)
    return product_out(repo.get_product(product_id))


@admin.delete("/products/{product_id}/assignments/{template_id}")
def unassign_template(product_id: str, template_id: str, repo: CatalogRepository = Depends(get_repo)):
    if not repo.unassign_template(product_id, template_id):
        raise HTTPException(status_code=404, detail="atribuição não encontrada")
    repo.refresh_price_range(product_id)
    return {"ok": True}


@admin.post("/products/{product_id}/price-range")
def refresh_price_range(product_id: str, repo: CatalogRepository = Depends(get_repo)):
    _product_or_404(repo, product_id)
    ok = repo.refresh_price_range(product_id)
    return {"ok": ok, "product": product_out(repo.get_product(product_id))}


# -------- semente / IA --------

@admin.post("/seed", status_code=201)
def seed(payload: Dict[str, Any] = Body(...), repo: CatalogRepository = Depends(get_repo)):
    try:
        data = check_menu(payload)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if repo.get_restaurant_by_slug(data["restaurant"]["slug"]):
        raise HTTPException(status_code=409, detail="slug já existe")
    return restaurant_out(repo.seed_menu(data))


@admin.post("/ai/description")
def describe(payload: DescribeIn, describer: DescriptionPort = Depends(get_describer)):
    return {"description": describer.generate(payload.product_name, payload.cuisine)}


# -------- logging --------

@router.get("/dashboard/logging", response_class=HTMLResponse, dependencies=[Depends(require_admin)])
def dashboard_logging(request: Request, repo: CatalogRepository = Depends(get_repo)):
    level = request.query_params.get("level")
    q = request.query_params.get("q")
    rows: List[Dict[str, Any]] = get_events(repo.engine, limit=300, level=level, q=q)

    def tr(r):
        return f"<tr><td>{esc(r['ts'])}</td><td>{esc(r['level'])}</td><td>{esc(r['msg'])}</td></tr>"

    html_doc = f"""
    <html><head><meta charset="utf-8"><title>Logs</title>
    <style>
      body{{font-family:system-ui;margin:24px}}
      table{{border-collapse:collapse;width:100%}}
      td,th{{border:1px solid #ddd;padding:8px;font-size:14px}}
      th{{background:#eee;text-align:left}}
      .toolbar input{{padding:6px;margin-right:6px}}
    </style></head>
    <body>
      <h3>Logs (protegido)</h3>
      <div class="toolbar">
        <form method="get">
          <label>Nível:</label>
          <input name="level" placeholder="INFO/WARNING/ERROR" value="{esc(level or '')}">
          <label>Busca:</label>
          <input name="q" placeholder="texto" value="{esc(q or '')}">
          <button type="submit">Filtrar</button>
          <a href="/dashboard/logging">Limpar</a>
        </form>
      </div>
      <table>
        <thead><tr><th>Hora</th><th>Nível</th><th>Mensagem</th></tr></thead>
        <tbody>
          {''.join(tr(r) for r in rows)}
        </tbody>
      </table>
    </body></html>
    """
    return HTMLResponse(html_doc)


router.include_router(admin, dependencies=[Depends(require_admin)])
