# giaycung_api/routers/products.py
from __future__ import annotations

from typing import Annotated, Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query

from ..deps import get_products, require_admin
from ..models.converters import to_api_list
from ..models.services import ProductService

router = APIRouter(prefix="/products", tags=["products"])

Service = Annotated[ProductService, Depends(get_products)]
Payload = Annotated[Dict[str, Any], Body()]


@router.get("")
def list_products(
    svc: Service,
    id: Optional[str] = Query(None, description="Return a single product"),
    category: Optional[str] = None,
    status: Optional[str] = None,
    q: Optional[str] = None,
):
    if id:
        return {"ok": True, "data": svc.get(id).to_api()}
    products = svc.list({"category": category, "status": status}, q)
    return {"ok": True, "data": to_api_list(products)}


@router.get("/{product_id}")
def get_product(product_id: str, svc: Service):
    return {"ok": True, "data": svc.get(product_id).to_api()}


@router.post("", dependencies=[Depends(require_admin)])
def create_product(payload: Payload, svc: Service):
    return {"ok": True, "data": svc.create(payload).to_api()}


@router.patch("/{product_id}", dependencies=[Depends(require_admin)])
def update_product(product_id: str, payload: Payload, svc: Service):
    return {"ok": True, "data": svc.update(product_id, payload).to_api()}


@router.delete("/{product_id}", dependencies=[Depends(require_admin)])
def delete_product(product_id: str, svc: Service):
    return {"ok": True, "data": svc.delete(product_id)}
