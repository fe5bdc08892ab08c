# giaycung_api/models/services.py

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from ..adapters.base import SheetsBackend
from ..core.errors import NotFound, ValidationError
from ..core.nested import CellJsonChildren, JoinedChildren
from ..core.rowstore import RowStore, TableSpec
from ..core.schema import Record
from ..core.validation import require_fields, safe_trim, to_number
from . import ApiModel, Order, ServiceOrder, Shoe
from .converters import (
    contact_from_sheets,
    message_from_sheets,
    news_from_sheets,
    order_from_sheets,
    product_from_sheets,
    service_order_from_sheets,
    shoe_from_sheets,
)
from .tables import (
    CONTACT,
    MESSAGES,
    NEWS,
    ORDER_ITEMS,
    ORDERS,
    PRODUCTS,
    SERVICE_ORDER_SHOES,
    SERVICE_ORDERS,
)

logger = logging.getLogger(__name__)

SHOES_TABLE = "table"
SHOES_CELL = "cell"


def _newest_first(models: List[Any], *tiebreak: str) -> List[Any]:
    """Sort by createdAt descending (ISO strings compare in time order), then tiebreak fields descending."""
    keys = ("createdAt",) + tiebreak
    return sorted(models, key=lambda m: tuple(safe_trim(getattr(m, k, "")) for k in keys), reverse=True)


class ServiceOrderService:
    """
    Business rules for service orders (cleaning jobs) and their shoe items:
      - orderNumber allocation (ORD-001, ORD-002, ...)
      - case-insensitive tracking lookup by orderNumber
      - soft delete (deleted=1, status=cancelled)
      - shoes kept either in service_order_shoes ("table") or in the
        legacy shoesJson cell ("cell")
    """

    def __init__(self, backend: SheetsBackend, shoes_storage: str = SHOES_TABLE) -> None:
        self.orders = RowStore(backend, SERVICE_ORDERS)
        self.shoes_storage = shoes_storage
        if shoes_storage == SHOES_CELL:
            self.shoes = CellJsonChildren(self.orders, "shoesJson", SERVICE_ORDER_SHOES, parent_key="orderId")
        elif shoes_storage == SHOES_TABLE:
            self.shoes = JoinedChildren(RowStore(backend, SERVICE_ORDER_SHOES), parent_key="orderId")
        else:
            raise ValueError(f"Unknown shoes storage: {shoes_storage}")

    # ========== reads ==========

    def _materialize(self, records: List[Record]) -> List[ServiceOrder]:
        if self.shoes_storage == SHOES_CELL:
            return [service_order_from_sheets(r) for r in records]

        buckets = self.shoes.group_by_parent()
        out = []
        for r in records:
            joined = buckets.get(r.id)
            # orders written before the shoes tab existed still carry shoesJson
            out.append(service_order_from_sheets(r, joined) if joined else service_order_from_sheets(r))
        return out

    def list(self) -> List[ServiceOrder]:
        return _newest_first(self._materialize(self.orders.list()), "orderNumber")

    def get(self, order_id: str) -> ServiceOrder:
        return self._materialize([self.orders.get(order_id)])[0]

    def track(self, code: str) -> ServiceOrder:
        code = safe_trim(code)
        if not code:
            raise ValidationError("Missing query: order / orderNumber", fields=["order"])
        found = self.orders.find_by("orderNumber", code, casefold=True)
        if found is None:
            raise NotFound(f"Order '{code}' not found")
        return self._materialize([found])[0]

    # ========== writes ==========

    def create(self, payload: Mapping[str, Any]) -> ServiceOrder:
        """
        Append a service order. Shoes given in the payload are added after the
        parent row; a failure part-way leaves the parent (and earlier shoes) in place.
        """
        fields = dict(payload)
        shoes = fields.pop("shoes", None) or []
        if not isinstance(shoes, list):
            raise ValidationError("shoes must be a list", fields=["shoes"])
        for key in ("id", "shoesJson"):
            fields.pop(key, None)
        record = self.orders.create(fields)
        logger.info("Service order %s created as %s", record.id, record.get("orderNumber"))
        for shoe in shoes:
            self.shoes.add(record.id, shoe)
        return self.get(record.id)

    def update(self, order_id: str, fields: Mapping[str, Any]) -> ServiceOrder:
        record = self.orders.patch(order_id, fields)
        return self._materialize([record])[0]

    def delete(self, order_id: str) -> Dict[str, str]:
        record = self.orders.delete(order_id)
        return {"id": record.id}

    def add_shoe(self, order_id: str, fields: Mapping[str, Any]) -> Shoe:
        if self.shoes_storage == SHOES_TABLE:
            self.orders.get(order_id)
        return shoe_from_sheets(self.shoes.add(order_id, fields), order_id)

    def update_shoe(self, order_id: str, shoe_id: str, fields: Mapping[str, Any]) -> Shoe:
        if self.shoes_storage == SHOES_TABLE:
            self.orders.get(order_id)
        return shoe_from_sheets(self.shoes.update(order_id, shoe_id, fields), order_id)

    def remove_shoe(self, order_id: str, shoe_id: str) -> Dict[str, str]:
        if self.shoes_storage == SHOES_TABLE:
            self.orders.get(order_id)
        self.shoes.remove(order_id, shoe_id)
        return {"id": shoe_id}


class OrderService:
    """
    Business rules for shop checkouts:
      - at least one valid item (product id or name, quantity > 0)
      - totalAmount = sum(quantity * price) over the items
      - cancel = soft delete (status=cancelled)
    """

    def __init__(self, backend: SheetsBackend) -> None:
        self.orders = RowStore(backend, ORDERS)
        self.items = JoinedChildren(RowStore(backend, ORDER_ITEMS), parent_key="orderId")

    @staticmethod
    def clean_items(raw: Iterable[Mapping[str, Any]]) -> List[Dict[str, Any]]:
        items = []
        for it in raw or []:
            if not isinstance(it, Mapping):
                continue
            product_id = safe_trim(it.get("productId") or it.get("id"))
            product_name = safe_trim(it.get("productName") or it.get("name"))
            quantity = to_number(it.get("quantity"))
            if (not product_id and not product_name) or quantity <= 0:
                continue
            items.append(
                {
                    "productId": product_id,
                    "productName": product_name,
                    "quantity": quantity,
                    "price": to_number(it.get("price")),
                }
            )
        return items

    @staticmethod
    def total_of(items: Iterable[Mapping[str, Any]]) -> Any:
        return to_number(sum(to_number(i.get("quantity")) * to_number(i.get("price")) for i in items))

    def _materialize(self, records: List[Record]) -> List[Order]:
        buckets = self.items.group_by_parent()
        return [order_from_sheets(r, buckets.get(r.id, [])) for r in records]

    def list(self) -> List[Order]:
        return _newest_first(self._materialize(self.orders.list()))

    def get(self, order_id: str) -> Order:
        return self._materialize([self.orders.get(order_id)])[0]

    def checkout(self, payload: Mapping[str, Any]) -> Order:
        """
        Create an order and its items. Items are appended after the order row;
        a failure part-way leaves the order with only the items written so far.
        """
        fields = dict(payload)
        require_fields(fields, ORDERS.required)
        items = self.clean_items(fields.pop("items", None) or [])
        if not items:
            raise ValidationError("Order must contain at least one valid item", fields=["items"])
        fields["totalAmount"] = self.total_of(items)
        fields.pop("status", None)

        record = self.orders.create(fields)
        for item in items:
            self.items.add(record.id, item)
        logger.info("Order %s created with %d items", record.id, len(items))
        return self.get(record.id)

    def update(self, order_id: str, fields: Mapping[str, Any]) -> Order:
        """Built from the written row: a status change to cancelled tombstones it for later reads."""
        record = self.orders.patch(order_id, fields)
        return self._materialize([record])[0]

    def cancel(self, order_id: str) -> Dict[str, str]:
        record = self.orders.delete(order_id)
        return {"id": record.id, "status": "cancelled"}


class ResourceService:
    """
    Flat resources (products, news, contact, messages): CRUD over one tab,
    hard delete, optional equality / text filters on list.
    """

    search_fields: tuple = ()

    def __init__(self, backend: SheetsBackend, spec: TableSpec, convert: Callable[[Record], ApiModel]) -> None:
        self.store = RowStore(backend, spec)
        self.convert = convert

    def list(self, filters: Optional[Mapping[str, Optional[str]]] = None, q: Optional[str] = None) -> List[ApiModel]:
        models = [self.convert(r) for r in self.store.list()]
        for name, wanted in (filters or {}).items():
            wanted = safe_trim(wanted)
            if wanted:
                models = [m for m in models if safe_trim(getattr(m, name, "")) == wanted]
        needle = safe_trim(q).casefold()
        if needle and self.search_fields:
            models = [
                m for m in models
                if any(needle in safe_trim(getattr(m, f, "")).casefold() for f in self.search_fields)
            ]
        return models

    def get(self, record_id: str) -> ApiModel:
        return self.convert(self.store.get(record_id))

    def create(self, payload: Mapping[str, Any]) -> ApiModel:
        return self.convert(self.store.create(payload))

    def update(self, record_id: str, fields: Mapping[str, Any]) -> ApiModel:
        return self.convert(self.store.patch(record_id, fields))

    def delete(self, record_id: str) -> Dict[str, str]:
        record = self.store.delete(record_id)
        return {"id": record.id}


class ProductService(ResourceService):
    search_fields = ("name", "description", "category")

    def __init__(self, backend: SheetsBackend) -> None:
        super().__init__(backend, PRODUCTS, product_from_sheets)


class NewsService(ResourceService):
    search_fields = ("title", "excerpt", "content")

    def __init__(self, backend: SheetsBackend) -> None:
        super().__init__(backend, NEWS, news_from_sheets)

    def list(self, filters=None, q=None):
        posts = super().list(filters, q)
        return sorted(posts, key=lambda p: safe_trim(p.publishedDate), reverse=True)


class ContactService(ResourceService):
    def __init__(self, backend: SheetsBackend) -> None:
        super().__init__(backend, CONTACT, contact_from_sheets)


class MessageService(ResourceService):
    search_fields = ("fullName", "phone", "email", "message")

    def __init__(self, backend: SheetsBackend) -> None:
        super().__init__(backend, MESSAGES, message_from_sheets)

    def submit(self, payload: Mapping[str, Any]) -> ApiModel:
        """Public contact form: status and id are always server-assigned."""
        fields = {k: v for k, v in payload.items() if k not in ("id", "status", "createdAt")}
        return self.create(fields)

    def list(self, filters=None, q=None):
        return _newest_first(super().list(filters, q))
