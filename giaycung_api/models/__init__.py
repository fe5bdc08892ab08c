from __future__ import annotations

from typing import Any, Dict, List, Union

from pydantic import BaseModel, Field

Number = Union[int, float]


class ApiModel(BaseModel):
    """
    Base for rows read from a sheet tab.

    `extra` carries columns found in the sheet header that the model does
    not name, so hand-added columns survive a read and show up in responses.
    """
    extra: Dict[str, str] = Field(default_factory=dict)

    def to_api(self) -> Dict[str, Any]:
        data = self.model_dump(exclude={"extra"})
        return {**self.extra, **data}


class Shoe(ApiModel):
    """
    Domain model for one shoe item under a service order
    (a `service_order_shoes` row, or one element of the legacy shoesJson cell).
    """
    id: str
    orderId: str = ""
    name: str = ""
    service: str = ""
    status: str = "received"
    images: List[str] = Field(default_factory=list)
    notes: str = ""


class ServiceOrder(ApiModel):
    """
    Domain model for a `service_orders` row with its shoes attached.
    """
    id: str
    orderNumber: str = ""
    customerName: str = ""
    customerPhone: str = ""
    createdAt: str = ""
    totalAmount: Number = 0
    status: str = "pending"
    assignedTo: str = ""
    shoes: List[Shoe] = Field(default_factory=list)


class OrderItem(ApiModel):
    id: str
    orderId: str = ""
    productId: str = ""
    productName: str = ""
    quantity: Number = 0
    price: Number = 0


class Order(ApiModel):
    """
    Domain model for a shop checkout (`orders` row + its `order_items`).
    """
    id: str
    customerName: str = ""
    customerPhone: str = ""
    customerAddress: str = ""
    notes: str = ""
    totalAmount: Number = 0
    status: str = "pending"
    createdAt: str = ""
    items: List[OrderItem] = Field(default_factory=list)


class Product(ApiModel):
    id: str
    name: str = ""
    description: str = ""
    price: Number = 0
    imageUrl: str = ""
    category: str = ""
    stock: Number = 0
    rating: Number = 0
    status: str = "published"


class NewsPost(ApiModel):
    id: str
    title: str = ""
    excerpt: str = ""
    content: str = ""
    imageUrl: str = ""
    category: str = "news"
    author: str = "Admin"
    publishedDate: str = ""
    status: str = "published"


class StoreContact(ApiModel):
    id: str
    name: str = ""
    address: str = ""
    phone: str = ""
    email: str = ""
    hours: str = ""
    googleMapsUrl: str = ""


class Message(ApiModel):
    id: str
    createdAt: str = ""
    fullName: str = ""
    phone: str = ""
    email: str = ""
    message: str = ""
    status: str = "new"
    source: str = "contact-page"
