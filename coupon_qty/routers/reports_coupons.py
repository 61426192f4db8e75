from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..db import get_db
from ..models.coupon import Coupon, CouponAudit
from ..services.coupons import get_coupon

router = APIRouter(prefix="/reports/coupons", tags=["reports", "coupon"])


@router.get("/usage")
def usage(db: Session = Depends(get_db)):
    """
    Snapshot del uso de cupones.
    {entries: [{code, usage_limit, usage_count, usage_remaining, count_by_quantity}]}
    """
    entries = []
    for c in db.execute(select(Coupon).order_by(Coupon.code)).scalars():
        entries.append(
            {
                "code": c.code,
                "usage_limit": c.usage_limit,
                "usage_count": int(c.usage_count or 0),
                "usage_remaining": c.usage_remaining,
                "count_by_quantity": bool(c.count_by_quantity),
            }
        )
    return {"entries": entries}


@router.get("/audit")
def audit_tail(code: str = Query(...), n: int = Query(default=50, ge=1, le=500), db: Session = Depends(get_db)):
    coupon = get_coupon(db, code)
    rows = (
        db.execute(
            select(CouponAudit)
            .where(CouponAudit.coupon_id == coupon.id)
            .order_by(CouponAudit.id.desc())
            .limit(n)
        )
        .scalars()
        .all()
    )
    events = [
        {"event": r.event, "notes": r.notes, "by_user": r.by_user, "at": r.at.isoformat() if r.at else None}
        for r in reversed(rows)
    ]
    return {"code": coupon.code, "count": len(events), "events": events}
