# giaycung_api/routers/messages.py
from __future__ import annotations

from typing import Annotated, Any, Dict, Optional

from fastapi import APIRouter, Body, Depends

from ..deps import get_messages, require_admin
from ..models.converters import to_api_list
from ..models.services import MessageService

router = APIRouter(prefix="/messages", tags=["messages"])

Service = Annotated[MessageService, Depends(get_messages)]
Payload = Annotated[Dict[str, Any], Body()]


@router.get("")
def list_messages(svc: Service, id: Optional[str] = None, status: Optional[str] = None):
    if id:
        return {"ok": True, "data": svc.get(id).to_api()}
    return {"ok": True, "data": to_api_list(svc.list({"status": status}))}


@router.get("/{message_id}")
def get_message(message_id: str, svc: Service):
    return {"ok": True, "data": svc.get(message_id).to_api()}


@router.post("")
def submit_message(payload: Payload, svc: Service):
    """
    Public contact form. Required: fullName, phone, message.

    Deliberately not admin-guarded: site visitors submit here. id, status and
    createdAt are always server-assigned.
    """
    return {"ok": True, "data": svc.submit(payload).to_api()}


@router.patch("/{message_id}", dependencies=[Depends(require_admin)])
def update_message(message_id: str, payload: Payload, svc: Service):
    """Admin inbox: mark read / replied / archived."""
    return {"ok": True, "data": svc.update(message_id, payload).to_api()}


@router.delete("/{message_id}", dependencies=[Depends(require_admin)])
def delete_message(message_id: str, svc: Service):
    return {"ok": True, "data": svc.delete(message_id)}
