# giaycung_api/routers/orders.py
from __future__ import annotations

from typing import Annotated, Any, Dict

from fastapi import APIRouter, Body, Depends

from ..deps import get_orders, require_admin
from ..models.converters import to_api_list
from ..models.services import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])

Service = Annotated[OrderService, Depends(get_orders)]
Payload = Annotated[Dict[str, Any], Body()]


@router.get("")
def list_orders(svc: Service):
    """Shop orders with their items, newest first."""
    return {"ok": True, "orders": to_api_list(svc.list())}


@router.get("/{order_id}")
def get_order(order_id: str, svc: Service):
    return {"ok": True, "order": svc.get(order_id).to_api()}


@router.post("")
def checkout(payload: Payload, svc: Service):
    """
    Public checkout. Required: customerName, customerPhone, customerAddress and
    at least one item {productId|productName, quantity > 0, price}.

    Deliberately not admin-guarded: storefront customers place orders here.
    Status is always server-assigned (pending).
    """
    return {"ok": True, "data": svc.checkout(payload).to_api()}


@router.patch("/{order_id}", dependencies=[Depends(require_admin)])
def update_order(order_id: str, payload: Payload, svc: Service):
    return {"ok": True, "data": svc.update(order_id, payload).to_api()}


@router.delete("/{order_id}", dependencies=[Depends(require_admin)])
def cancel_order(order_id: str, svc: Service):
    """Soft delete: status becomes cancelled and the order drops out of listings."""
    return {"ok": True, "data": svc.cancel(order_id)}
