# giaycung_api/routers/service_orders.py
from __future__ import annotations

from typing import Annotated, Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query

from ..deps import get_service_orders, require_admin
from ..models.converters import to_api_list
from ..models.services import ServiceOrderService

router = APIRouter(prefix="/service-orders", tags=["service-orders"])

Service = Annotated[ServiceOrderService, Depends(get_service_orders)]
Payload = Annotated[Dict[str, Any], Body()]
Admin = [Depends(require_admin)]


# ========== public reads ==========

@router.get("")
def list_service_orders(svc: Service):
    """All live service orders, newest first, each with its shoes."""
    return {"ok": True, "orders": to_api_list(svc.list())}


@router.get("/track")
def track_service_order(
    svc: Service,
    order: Optional[str] = Query(None, description="Order number, e.g. ORD-001"),
    orderNumber: Optional[str] = Query(None),
    code: Optional[str] = Query(None),
):
    """Customer-facing lookup by order number (case-insensitive)."""
    found = svc.track(order or orderNumber or code or "")
    return {"ok": True, "order": found.to_api()}


@router.get("/{order_id}")
def get_service_order(order_id: str, svc: Service):
    return {"ok": True, "order": svc.get(order_id).to_api()}


# ========== admin writes ==========

@router.post("", dependencies=Admin)
def create_service_order(payload: Payload, svc: Service):
    """Required: customerName, customerPhone. orderNumber is allocated when absent."""
    return {"ok": True, "data": svc.create(payload).to_api()}


@router.patch("/{order_id}", dependencies=Admin)
def update_service_order(order_id: str, payload: Payload, svc: Service):
    return {"ok": True, "data": svc.update(order_id, payload).to_api()}


@router.delete("/{order_id}", dependencies=Admin)
def delete_service_order(order_id: str, svc: Service):
    """Soft delete: the row stays with deleted=1 and status=cancelled."""
    return {"ok": True, "data": svc.delete(order_id)}


@router.post("/{order_id}/shoes", dependencies=Admin)
def add_shoe(order_id: str, payload: Payload, svc: Service):
    """Required: name, service."""
    return {"ok": True, "data": svc.add_shoe(order_id, payload).to_api()}


@router.patch("/{order_id}/shoes/{shoe_id}", dependencies=Admin)
def update_shoe(order_id: str, shoe_id: str, payload: Payload, svc: Service):
    return {"ok": True, "data": svc.update_shoe(order_id, shoe_id, payload).to_api()}


@router.delete("/{order_id}/shoes/{shoe_id}", dependencies=Admin)
def delete_shoe(order_id: str, shoe_id: str, svc: Service):
    return {"ok": True, "data": svc.remove_shoe(order_id, shoe_id)}
