from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import relationship

from ..db import Base


class Order(Base):
    __tablename__ = "shop_order"
    id = Column(Integer, primary_key=True)
    status = Column(String, nullable=False, default="pending")  # pending | processing | completed | cancelled
    subtotal = Column(Numeric(12, 2), default=0)
    discount_total = Column(Numeric(12, 2), default=0)
    total = Column(Numeric(12, 2), default=0)
    # marca de idempotencia: el uso del cupón ya se corrigió por unidades
    usage_adjusted = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    lines = relationship("OrderLine", back_populates="order", cascade="all, delete-orphan", order_by="OrderLine.id")
    coupons = relationship("OrderCoupon", back_populates="order", cascade="all, delete-orphan")

    @property
    def coupon_codes(self):
        return {c.code for c in self.coupons}


class OrderLine(Base):
    __tablename__ = "shop_order_line"
    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("shop_order.id"), nullable=False)
    product_id = Column(Integer, nullable=False)
    name = Column(String)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False)
    subtotal = Column(Numeric(12, 2), nullable=False)  # antes de descuento
    total = Column(Numeric(12, 2), nullable=False)  # después de descuento

    order = relationship("Order", back_populates="lines")


class OrderCoupon(Base):
    __tablename__ = "shop_order_coupon"
    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("shop_order.id"), nullable=False)
    code = Column(String, nullable=False)
    discount_applied = Column(Numeric(12, 2), default=0)

    order = relationship("Order", back_populates="coupons")

    __table_args__ = (UniqueConstraint("order_id", "code", name="ux_order_coupon"),)
