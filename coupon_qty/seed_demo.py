from decimal import Decimal

from .db import Base, SessionLocal, engine
from .models.coupon import Coupon

DEMO_COUPONS = [
    # 100% sobre 8 unidades en total
    {"code": "SAVE8", "discount_type": "percent", "amount": Decimal("100"), "usage_limit": 8},
    {"code": "SAVE3", "discount_type": "percent", "amount": Decimal("50"), "usage_limit": 3},
]


def main():
    Base.metadata.create_all(bind=engine)
    s = SessionLocal()
    try:
        for data in DEMO_COUPONS:
            c = s.query(Coupon).filter_by(code=data["code"]).first()
            if not c:
                c = Coupon(usage_count=0, count_by_quantity=True, individual_use=True, is_active=True, **data)
                s.add(c)
                s.commit()
            print("Seed coupon:", c.code, "limit", c.usage_limit, "used", c.usage_count)
    finally:
        s.close()


if __name__ == "__main__":
    main()
