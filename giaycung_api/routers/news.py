# giaycung_api/routers/news.py
from __future__ import annotations

from typing import Annotated, Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query

from ..deps import get_news, require_admin
from ..models.converters import to_api_list
from ..models.services import NewsService

router = APIRouter(prefix="/news", tags=["news"])

Service = Annotated[NewsService, Depends(get_news)]
Payload = Annotated[Dict[str, Any], Body()]


@router.get("")
def list_news(
    svc: Service,
    id: Optional[str] = Query(None, description="Return a single post"),
    category: Optional[str] = None,
    status: Optional[str] = None,
    q: Optional[str] = Query(None, description="Search title, excerpt and content"),
):
    """Posts sorted by publishedDate, newest first."""
    if id:
        return {"ok": True, "data": svc.get(id).to_api()}
    posts = svc.list({"category": category, "status": status}, q)
    return {"ok": True, "data": to_api_list(posts)}


@router.get("/{post_id}")
def get_post(post_id: str, svc: Service):
    return {"ok": True, "data": svc.get(post_id).to_api()}


@router.post("", dependencies=[Depends(require_admin)])
def create_post(payload: Payload, svc: Service):
    return {"ok": True, "data": svc.create(payload).to_api()}


@router.patch("/{post_id}", dependencies=[Depends(require_admin)])
def update_post(post_id: str, payload: Payload, svc: Service):
    return {"ok": True, "data": svc.update(post_id, payload).to_api()}


@router.delete("/{post_id}", dependencies=[Depends(require_admin)])
def delete_post(post_id: str, svc: Service):
    return {"ok": True, "data": svc.delete(post_id)}
