from sqlalchemy import (
    Column,
    Integer,
    String,
    Float,
    JSON,
    DateTime,
    ForeignKey,
    Text,
    Index,
    func,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    subcategory = Column(String, nullable=True, index=True)  # e.g. "zestawy", "futomaki", "przystawki"
    description = Column(Text, nullable=True)  # set composition and upgrade offer live here
    base_price = Column(Float, nullable=False, default=0.0)

    # option name -> price modifier in grosze, from the product's option groups
    option_prices = Column(JSON, default=dict)

    # None means the product is offered in every restaurant
    restaurant_slug = Column(String, nullable=True, index=True)

    order_items = relationship("OrderItem", back_populates="product")


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    status = Column(String, nullable=False, default="new", index=True)  # new/accepted/completed/cancelled
    restaurant_slug = Column(String, nullable=False, index=True)
    total_price = Column(Float, nullable=False, default=0.0)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")

    __table_args__ = (
        Index("ix_orders_restaurant_created_at", "restaurant_slug", "created_at"),
    )


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=True)

    name = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Float, nullable=False)

    addons = Column(JSON, nullable=True)  # raw addon strings as priced
    swaps = Column(JSON, nullable=True)
    set_swaps = Column(JSON, nullable=True)  # per-row summary for the kitchen
    display_addons = Column(JSON, nullable=True)
    note = Column(Text, nullable=True)

    addons_cost = Column(Float, nullable=False, default=0.0)
    line_total = Column(Float, nullable=False)

    order = relationship("Order", back_populates="items")
    product = relationship("Product", back_populates="order_items")
