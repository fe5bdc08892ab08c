# giaycung_api/routers/contact.py
from __future__ import annotations

from typing import Annotated, Any, Dict, Optional

from fastapi import APIRouter, Body, Depends

from ..deps import get_contact, require_admin
from ..models.converters import to_api_list
from ..models.services import ContactService

router = APIRouter(prefix="/contact", tags=["contact"])

Service = Annotated[ContactService, Depends(get_contact)]
Payload = Annotated[Dict[str, Any], Body()]


@router.get("")
def list_stores(svc: Service, id: Optional[str] = None):
    """Store locations shown on the contact page."""
    if id:
        return {"ok": True, "data": svc.get(id).to_api()}
    return {"ok": True, "data": to_api_list(svc.list())}


@router.get("/{store_id}")
def get_store(store_id: str, svc: Service):
    return {"ok": True, "data": svc.get(store_id).to_api()}


@router.post("", dependencies=[Depends(require_admin)])
def create_store(payload: Payload, svc: Service):
    return {"ok": True, "data": svc.create(payload).to_api()}


@router.patch("/{store_id}", dependencies=[Depends(require_admin)])
def update_store(store_id: str, payload: Payload, svc: Service):
    return {"ok": True, "data": svc.update(store_id, payload).to_api()}


@router.delete("/{store_id}", dependencies=[Depends(require_admin)])
def delete_store(store_id: str, svc: Service):
    return {"ok": True, "data": svc.delete(store_id)}
