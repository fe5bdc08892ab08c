# giaycung_api/deps.py
"""
DI helpers shared by all routers.

Tests swap the backend and settings through app.dependency_overrides on
get_settings / get_backend; everything else is built from those two.
"""
from __future__ import annotations

import logging
from typing import Annotated, Optional

from fastapi import Depends, Request

from .adapters.base import SheetsBackend
from .core.auth import AdminGuard
from .models.services import (
    ContactService,
    MessageService,
    NewsService,
    OrderService,
    ProductService,
    ServiceOrderService,
)
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

SettingsDep = Annotated[Settings, Depends(get_settings)]

_backend: Optional[SheetsBackend] = None


def build_backend(settings: Settings) -> SheetsBackend:
    backend_name = settings.storage_backend.strip().lower()
    if backend_name == "memory":
        from .adapters.memory import InMemoryBackend

        logger.info("Storage backend: MEMORY (nothing is persisted)")
        return InMemoryBackend()
    if backend_name == "sheets":
        from .adapters.sheets import GSheetsBackend

        logger.info("Storage backend: SHEETS")
        return GSheetsBackend(settings)
    raise ValueError(f"Unknown STORAGE_BACKEND: {settings.storage_backend}")


def get_backend(settings: SettingsDep) -> SheetsBackend:
    """Process-wide backend, created on first use."""
    global _backend
    if _backend is None:
        _backend = build_backend(settings)
    return _backend


Backend = Annotated[SheetsBackend, Depends(get_backend)]


def get_admin_guard(settings: SettingsDep) -> AdminGuard:
    return AdminGuard(settings)


Guard = Annotated[AdminGuard, Depends(get_admin_guard)]


def require_admin(request: Request, guard: Guard) -> None:
    """Route dependency for every admin-only write; raises Unauthorized (401)."""
    guard.ensure(request.headers)


# ========== per-resource services ==========

def get_service_orders(backend: Backend, settings: SettingsDep) -> ServiceOrderService:
    return ServiceOrderService(backend, settings.shoes_storage.strip().lower())


def get_orders(backend: Backend) -> OrderService:
    return OrderService(backend)


def get_products(backend: Backend) -> ProductService:
    return ProductService(backend)


def get_news(backend: Backend) -> NewsService:
    return NewsService(backend)


def get_contact(backend: Backend) -> ContactService:
    return ContactService(backend)


def get_messages(backend: Backend) -> MessageService:
    return MessageService(backend)
