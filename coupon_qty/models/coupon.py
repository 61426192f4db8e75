from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)

from ..db import Base


class Coupon(Base):
    __tablename__ = "coupon"
    id = Column(Integer, primary_key=True)
    code = Column(String, unique=True, index=True, nullable=False)
    discount_type = Column(String, nullable=False, default="percent")  # 'percent' | 'amount'
    amount = Column(Numeric(12, 2), nullable=False)
    usage_limit = Column(Integer)  # NULL = sin límite
    usage_count = Column(Integer, nullable=False, default=0)
    count_by_quantity = Column(Boolean, nullable=False, default=False)
    individual_use = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        CheckConstraint("usage_limit IS NULL OR usage_limit > 0", name="ck_coupon_usage_limit"),
    )

    @property
    def usage_remaining(self):
        if self.usage_limit is None:
            return None
        return max(0, self.usage_limit - (self.usage_count or 0))


class CouponAudit(Base):
    __tablename__ = "coupon_audit"
    id = Column(Integer, primary_key=True)
    coupon_id = Column(Integer, ForeignKey("coupon.id"), nullable=False)
    event = Column(String, nullable=False)  # used | usage_reconciled
    at = Column(DateTime, default=datetime.utcnow)
    by_user = Column(String)
    notes = Column(String, nullable=False)

    # un evento por (cupón, orden): el INSERT duplicado se ignora
    __table_args__ = (UniqueConstraint("coupon_id", "event", "notes", name="ux_coupon_audit_evt"),)
