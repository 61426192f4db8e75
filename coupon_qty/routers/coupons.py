from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..core.schemas import CouponIn, CouponOut, CouponPatch
from ..db import get_db
from ..models.coupon import Coupon
from ..services.coupons import apply_coupon_settings, get_coupon

router = APIRouter(prefix="/coupons", tags=["coupon"])

# campos que admiten null explícito en un PATCH
_NULLABLE = {"usage_limit"}


@router.post("", response_model=CouponOut)
def create_coupon(body: CouponIn, db: Session = Depends(get_db)):
    exists = db.execute(select(Coupon.id).where(Coupon.code == body.code)).scalar()
    if exists:
        raise HTTPException(status_code=409, detail="COUPON_CODE_EXISTS")

    data = body.model_dump()
    if "individual_use" not in body.model_fields_set:
        data.pop("individual_use")
    coupon = Coupon(code=data.pop("code"), usage_count=0)
    apply_coupon_settings(coupon, data)
    db.add(coupon)
    db.commit()
    db.refresh(coupon)
    return coupon


@router.get("/{code}", response_model=CouponOut)
def read_coupon(code: str, db: Session = Depends(get_db)):
    return get_coupon(db, code)


@router.patch("/{code}", response_model=CouponOut)
def update_coupon(code: str, body: CouponPatch, db: Session = Depends(get_db)):
    coupon = get_coupon(db, code)
    changes = {
        k: v for k, v in body.model_dump(exclude_unset=True).items() if v is not None or k in _NULLABLE
    }
    try:
        apply_coupon_settings(coupon, changes)
    except HTTPException:
        db.rollback()
        raise
    db.commit()
    db.refresh(coupon)
    return coupon
