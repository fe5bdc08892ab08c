# giaycung_api/models/tables.py
"""
Sheet tabs used by the API: canonical headers and per-table store rules.
"""
from __future__ import annotations

from ..core.rowstore import HARD, SOFT, SequenceRule, TableSpec, hex_id, timestamp_id, utc_date, utc_iso
from ..core.validation import clean_string_list

# ========== Sheet schema (HEADERS) ==========

HEADERS = {
    "service_orders": [
        "id",
        "orderNumber",
        "customerName",
        "customerPhone",
        "createdAt",
        "totalAmount",
        "status",
        "assignedTo",
        "shoesJson",
        "deleted",
    ],
    "service_order_shoes": [
        "id",
        "orderId",
        "name",
        "service",
        "status",
        "images",
        "notes",
        "deleted",
    ],
    "orders": [
        "id",
        "customerName",
        "customerPhone",
        "customerAddress",
        "notes",
        "totalAmount",
        "status",
        "createdAt",
    ],
    "order_items": [
        "id",
        "orderId",
        "productId",
        "productName",
        "quantity",
        "price",
    ],
    "products": [
        "id",
        "name",
        "description",
        "price",
        "imageUrl",
        "category",
        "stock",
        "rating",
        "status",
    ],
    "news": [
        "id",
        "title",
        "excerpt",
        "content",
        "imageUrl",
        "category",
        "author",
        "publishedDate",
        "status",
    ],
    "contact": [
        "id",
        "name",
        "address",
        "phone",
        "email",
        "hours",
        "googleMapsUrl",
    ],
    "messages": [
        "id",
        "createdAt",
        "fullName",
        "phone",
        "email",
        "message",
        "status",
        "source",
    ],
}

# ========== Enums ==========

ORDER_STATUSES = ("pending", "processing", "completed", "cancelled")
SHOE_STATUSES = ("received", "processing", "completed")
PUBLISH_STATUSES = ("published", "draft")
MESSAGE_STATUSES = ("new", "read", "replied", "archived")

# ========== Table specs ==========

SERVICE_ORDERS = TableSpec(
    name="service_orders",
    header=tuple(HEADERS["service_orders"]),
    id_factory=timestamp_id("ord"),
    required=("customerName", "customerPhone"),
    choices={"status": ORDER_STATUSES},
    defaults={"status": "pending"},
    numeric=("totalAmount",),
    timestamps={"createdAt": utc_iso},
    sequence=SequenceRule(column="orderNumber", prefix="ORD"),
    delete_policy=SOFT,
    tombstone=("deleted", "1"),
    soft_delete={"deleted": "1", "status": "cancelled"},
    immutable=("id", "shoesJson", "deleted"),
)

SERVICE_ORDER_SHOES = TableSpec(
    name="service_order_shoes",
    header=tuple(HEADERS["service_order_shoes"]),
    id_factory=hex_id("SH"),
    required=("orderId", "name", "service"),
    choices={"status": SHOE_STATUSES},
    defaults={"status": "received"},
    normalizers={"images": clean_string_list},
    delete_policy=SOFT,
    tombstone=("deleted", "1"),
    soft_delete={"deleted": "1"},
    immutable=("id", "orderId", "deleted"),
)

ORDERS = TableSpec(
    name="orders",
    header=tuple(HEADERS["orders"]),
    id_factory=hex_id("ORD"),
    required=("customerName", "customerPhone", "customerAddress"),
    choices={"status": ORDER_STATUSES},
    defaults={"status": "pending"},
    numeric=("totalAmount",),
    timestamps={"createdAt": utc_iso},
    delete_policy=SOFT,
    tombstone=("status", "cancelled"),
    soft_delete={"status": "cancelled"},
)

ORDER_ITEMS = TableSpec(
    name="order_items",
    header=tuple(HEADERS["order_items"]),
    id_factory=hex_id("ITM"),
    required=("orderId",),
    numeric=("quantity", "price"),
    delete_policy=HARD,
    immutable=("id", "orderId"),
)

PRODUCTS = TableSpec(
    name="products",
    header=tuple(HEADERS["products"]),
    id_factory=timestamp_id("prd"),
    required=("name", "description", "imageUrl", "category"),
    choices={"status": PUBLISH_STATUSES},
    defaults={"status": "published"},
    numeric=("price", "stock", "rating"),
)

NEWS = TableSpec(
    name="news",
    header=tuple(HEADERS["news"]),
    id_factory=timestamp_id("news"),
    required=("title", "excerpt", "content", "imageUrl"),
    choices={"status": PUBLISH_STATUSES},
    defaults={"status": "published", "category": "news", "author": "Admin"},
    timestamps={"publishedDate": utc_date},
)

CONTACT = TableSpec(
    name="contact",
    header=tuple(HEADERS["contact"]),
    id_factory=timestamp_id("store"),
    required=("name", "address", "phone", "email"),
)

MESSAGES = TableSpec(
    name="messages",
    header=tuple(HEADERS["messages"]),
    id_factory=timestamp_id("msg"),
    required=("fullName", "phone", "message"),
    choices={"status": MESSAGE_STATUSES},
    defaults={"status": "new", "source": "contact-page"},
    timestamps={"createdAt": utc_iso},
)
