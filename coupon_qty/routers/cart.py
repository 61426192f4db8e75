from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..core.schemas import CartIn, CartOut
from ..db import get_db
from ..services.cart import calculate_cart

router = APIRouter(prefix="/cart", tags=["cart"])


@router.post("/calculate", response_model=CartOut)
def calculate(body: CartIn, db: Session = Depends(get_db)):
    # solo lectura: cada llamada es una pasada nueva con su propio ledger
    return calculate_cart(db, body.items, body.coupon_codes)
