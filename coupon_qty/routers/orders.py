from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..core.schemas import CartIn, OrderOut, StatusIn
from ..db import get_db
from ..services.orders import get_order, place_order, set_order_status

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post("", response_model=OrderOut)
def create_order(body: CartIn, db: Session = Depends(get_db)):
    order = place_order(db, body.items, body.coupon_codes)
    return OrderOut.model_validate(order)


@router.get("/{order_id}", response_model=OrderOut)
def read_order(order_id: int, db: Session = Depends(get_db)):
    return OrderOut.model_validate(get_order(db, order_id))


@router.post("/{order_id}/status", response_model=OrderOut)
def change_status(order_id: int, body: StatusIn, db: Session = Depends(get_db)):
    order = set_order_status(db, order_id, body.status)
    return OrderOut.model_validate(order)
