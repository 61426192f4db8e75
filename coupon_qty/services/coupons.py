from decimal import Decimal

from fastapi import HTTPException
from sqlalchemy import select

from ..models.coupon import Coupon


def normalize_code(code: str) -> str:
    return (code or "").strip().upper()


def get_coupon(db, code: str) -> Coupon:
    coupon = db.execute(select(Coupon).where(Coupon.code == normalize_code(code))).scalar_one_or_none()
    if coupon is None:
        raise HTTPException(status_code=404, detail="COUPON_NOT_FOUND")
    return coupon


def apply_coupon_settings(coupon: Coupon, changes: dict) -> Coupon:
    """
    Aplica cambios de configuración respetando la casilla "contar uso por
    cantidad":
    - activarla fuerza "uso individual";
    - desactivarla sin indicar individual_use también lo desactiva;
    - no se puede quitar "uso individual" mientras siga activa.
    """
    changes = dict(changes)
    want_qty = changes.pop("count_by_quantity", None)
    want_individual = changes.pop("individual_use", None)

    for field, value in changes.items():
        setattr(coupon, field, value)

    # el rango se revisa sobre el par ya combinado (tipo, monto)
    if coupon.discount_type == "percent" and Decimal(str(coupon.amount)) > 100:
        raise HTTPException(status_code=422, detail="PERCENT_OUT_OF_RANGE")

    count_by_quantity = bool(coupon.count_by_quantity) if want_qty is None else bool(want_qty)

    if count_by_quantity:
        if want_individual is False:
            raise HTTPException(status_code=400, detail="INDIVIDUAL_USE_LOCKED")
        individual_use = True
    elif want_qty is False and coupon.count_by_quantity and want_individual is None:
        individual_use = False
    elif want_individual is not None:
        individual_use = bool(want_individual)
    else:
        individual_use = bool(coupon.individual_use)

    coupon.count_by_quantity = count_by_quantity
    coupon.individual_use = individual_use
    return coupon


def validate_for_cart(coupons) -> None:
    """Reglas de la plataforma antes de calcular descuentos."""
    for c in coupons:
        if not c.is_active:
            raise HTTPException(status_code=400, detail="COUPON_INACTIVE")
        if c.usage_limit is not None and (c.usage_count or 0) >= c.usage_limit:
            raise HTTPException(status_code=400, detail="COUPON_USAGE_LIMIT_REACHED")
    if len(coupons) > 1 and any(c.individual_use for c in coupons):
        raise HTTPException(status_code=400, detail="COUPON_INDIVIDUAL_USE_ONLY")
