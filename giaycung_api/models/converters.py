from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Type, TypeVar, Union

from ..core.nested import parse_children
from ..core.rowstore import TableSpec
from ..core.schema import Record
from ..core.validation import clean_string_list, default_if_blank, safe_trim, to_number
from . import (
    ApiModel,
    Message,
    NewsPost,
    Order,
    OrderItem,
    Product,
    ServiceOrder,
    Shoe,
    StoreContact,
)
from .tables import CONTACT, MESSAGES, NEWS, ORDER_ITEMS, ORDERS, PRODUCTS, SERVICE_ORDER_SHOES, SERVICE_ORDERS

M = TypeVar("M", bound=ApiModel)
Row = Union[Record, Mapping[str, Any]]

# Bookkeeping columns that never appear in API output.
_INTERNAL = ("shoesJson", "deleted")


def _fields_of(row: Row) -> Mapping[str, Any]:
    return row.fields if isinstance(row, Record) else row


def _coerce(model: Type[M], row: Row, spec: TableSpec, **nested: Any) -> M:
    """
    Build `model` from a sheet row:
      - numeric columns -> to_number (never raises)
      - blank enum columns -> the enum default
      - list columns (images) -> cleaned list of strings
      - unknown non-empty columns -> `extra`
    """
    names = set(model.model_fields) - {"extra"} - set(nested)
    data: Dict[str, Any] = {}
    extra: Dict[str, str] = {}
    for key, value in _fields_of(row).items():
        if not key or key in _INTERNAL:
            continue
        if key not in names:
            if safe_trim(value):
                extra[key] = safe_trim(value)
            continue
        if key in spec.numeric:
            data[key] = to_number(value)
        elif key in spec.choices:
            data[key] = default_if_blank(value, spec.defaults.get(key, ""))
        elif isinstance(value, list) or key in spec.normalizers:
            data[key] = clean_string_list(value)
        else:
            data[key] = safe_trim(value)
    data["id"] = safe_trim(data.get("id"))
    return model(**data, extra=extra, **nested)


def shoe_from_sheets(row: Row, order_id: str = "") -> Shoe:
    shoe = _coerce(Shoe, row, SERVICE_ORDER_SHOES)
    if order_id and not shoe.orderId:
        shoe.orderId = order_id
    return shoe


def service_order_from_sheets(row: Row, shoes: Optional[Iterable[Row]] = None) -> ServiceOrder:
    """
    Convert a `service_orders` row. `shoes` are the joined child rows; when
    None the legacy shoesJson cell of the row is used instead.
    """
    order_id = safe_trim(_fields_of(row).get("id"))
    if shoes is None:
        shoes = parse_children(_fields_of(row).get("shoesJson"))
    return _coerce(
        ServiceOrder,
        row,
        SERVICE_ORDERS,
        shoes=[shoe_from_sheets(s, order_id) for s in shoes],
    )


def order_item_from_sheets(row: Row) -> OrderItem:
    return _coerce(OrderItem, row, ORDER_ITEMS)


def order_from_sheets(row: Row, items: Iterable[Row] = ()) -> Order:
    return _coerce(Order, row, ORDERS, items=[order_item_from_sheets(i) for i in items])


def product_from_sheets(row: Row) -> Product:
    return _coerce(Product, row, PRODUCTS)


def news_from_sheets(row: Row) -> NewsPost:
    return _coerce(NewsPost, row, NEWS)


def contact_from_sheets(row: Row) -> StoreContact:
    return _coerce(StoreContact, row, CONTACT)


def message_from_sheets(row: Row) -> Message:
    return _coerce(Message, row, MESSAGES)


def to_api_list(models: Iterable[ApiModel]) -> List[Dict[str, Any]]:
    return [m.to_api() for m in models]
