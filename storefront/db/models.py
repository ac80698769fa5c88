from sqlmodel import Relationship, SQLModel, Field
from datetime import datetime, timezone
from typing import List, Optional
import uuid
from sqlalchemy import Column, String, DateTime, Numeric
from enum import Enum


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


"""
___________________________________________________

1.  User Table
___________________________________________________

"""
class User(SQLModel, table = True):
    __tablename__ = 'users'

    uid : uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    email : str = Field(sa_column=Column(String, unique=True, index=True, nullable=False))
    name : str
    is_admin : bool = Field(default = False)
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime(timezone=True), index=True, nullable=False))

    orders: List["Order"] = Relationship(back_populates="user")

    def __repr__(self):
        return f'<User {self.email}>'


"""
___________________________________________________

2.  Category / Product Tables
___________________________________________________

"""
class Category(SQLModel, table=True):
    __tablename__ = "categories"

    uid: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str
    slug: str = Field(sa_column=Column(String, unique=True, index=True, nullable=False))

    products: List["Product"] = Relationship(back_populates="category")

    def __repr__(self):
        return f"<Category {self.slug}>"


class Product(SQLModel, table=True):
    __tablename__ = "products"

    uid: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str
    price: float = Field(sa_column=Column(Numeric(10, 2), nullable=False))  # 10 total digits, 2 decimal places
    # Units on hand, never units sold
    stock: int = Field(default=0, ge=0)
    is_featured: bool = Field(default=False)
    is_on_sale: bool = Field(default=False)
    category_uid: Optional[uuid.UUID] = Field(default=None, foreign_key="categories.uid")
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime(timezone=True), index=True, nullable=False))

    category: Optional[Category] = Relationship(back_populates="products")
    order_items: List["OrderItem"] = Relationship(back_populates="product")

    def __repr__(self):
        return f"<Product {self.name}>"


"""
___________________________________________________

3.  Order Tables
___________________________________________________

"""
def generate_order_number():
    return f"ORD-{uuid.uuid4().hex[:6].upper()}"  # Example: ORD-3F9D1A


class OrderStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    processing = "processing"
    shipped = "shipped"
    delivered = "delivered"
    cancelled = "cancelled"
    refunded = "refunded"


# Statuses that count towards revenue, order totals and top sellers
REVENUE_STATUSES = (
    OrderStatus.confirmed,
    OrderStatus.processing,
    OrderStatus.shipped,
    OrderStatus.delivered,
)


class Order(SQLModel, table=True):
    __tablename__ = "orders"

    uid: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    order_number: str = Field(default_factory=generate_order_number, index=True, unique=True)
    user_uid: Optional[uuid.UUID] = Field(default=None, foreign_key="users.uid")
    status: OrderStatus = Field(default=OrderStatus.pending, index=True)
    total: float = Field(sa_column=Column(Numeric(10, 2), nullable=False))
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime(timezone=True), index=True, nullable=False))

    user: Optional[User] = Relationship(back_populates="orders")
    items: List["OrderItem"] = Relationship(back_populates="order", sa_relationship_kwargs={'lazy': 'selectin', 'cascade': 'all, delete-orphan'})

    def __repr__(self):
        return f"<Order {self.order_number} {self.status}>"


class OrderItem(SQLModel, table=True):
    __tablename__ = "order_items"

    uid: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    order_uid: uuid.UUID = Field(foreign_key="orders.uid", index=True)
    product_uid: uuid.UUID = Field(foreign_key="products.uid", index=True)
    quantity: int = Field(gt=0)
    price: float = Field(sa_column=Column(Numeric(10, 2), nullable=False))

    order: Optional[Order] = Relationship(back_populates="items")
    product: Optional[Product] = Relationship(back_populates="order_items")
