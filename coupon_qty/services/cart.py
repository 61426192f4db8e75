import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import List

from fastapi import HTTPException
from sqlalchemy import select

from ..core.allocation import AllocationLedger, CartLine, allocation_sequence
from ..core.config import settings
from ..hooks import COUPON_DISCOUNT_AMOUNT, hooks as default_hooks
from ..models.coupon import Coupon
from .coupons import normalize_code, validate_for_cart

logger = logging.getLogger(__name__)


def money(v) -> Decimal:
    if not isinstance(v, Decimal):
        v = Decimal(str(v))
    return v.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def proposed_discount(coupon: Coupon, line: CartLine) -> Decimal:
    """Descuento que la plataforma daría a la línea completa, sin tope de unidades."""
    value = Decimal(str(coupon.amount))
    if coupon.discount_type == "percent":
        return line.subtotal * value / Decimal("100")
    if coupon.discount_type == "amount":
        return min(value, line.unit_price) * line.quantity
    return Decimal("0")


def load_cart_coupons(db, codes) -> List[Coupon]:
    seen = []
    for code in codes:
        c = normalize_code(code)
        if c and c not in seen:
            seen.append(c)
    coupons = []
    for code in seen:
        coupon = db.execute(select(Coupon).where(Coupon.code == code)).scalar_one_or_none()
        if coupon is None:
            raise HTTPException(status_code=404, detail="COUPON_NOT_FOUND")
        coupons.append(coupon)
    validate_for_cart(coupons)
    return coupons


def calculate_cart(db, items, coupon_codes, hooks=None, order=None) -> dict:
    """
    Una pasada de cálculo del carrito. El ledger nace aquí y muere al terminar,
    así que recalcular el mismo carrito da siempre el mismo resultado.
    """
    hooks = hooks or default_hooks
    order = order or settings.allocation_order

    lines = [
        CartLine(product_id=it.product_id, quantity=it.quantity, unit_price=it.unit_price, name=it.name)
        for it in items
    ]
    coupons = load_cart_coupons(db, coupon_codes)

    ledger = AllocationLedger()
    discounts = [Decimal("0.00")] * len(lines)
    discounted_qty = [0] * len(lines)
    by_coupon = {c.code: Decimal("0.00") for c in coupons}

    for i in allocation_sequence(lines, order):
        line = lines[i]
        before = sum(ledger.granted.values())
        for coupon in coupons:
            proposed = proposed_discount(coupon, line)
            applied = hooks.apply_filters(COUPON_DISCOUNT_AMOUNT, proposed, line, coupon, ledger)
            # el descuento de una línea nunca supera su subtotal
            applied = min(money(applied), money(line.subtotal) - discounts[i])
            discounts[i] += applied
            by_coupon[coupon.code] += applied
        # unidades realmente descontadas: las que concedió el ledger, o toda la línea
        moved = sum(ledger.granted.values()) - before
        if discounts[i] <= 0:
            continue
        discounted_qty[i] = moved if moved > 0 else line.quantity

    out_lines = []
    for line, disc, dq in zip(lines, discounts, discounted_qty):
        subtotal = money(line.subtotal)
        out_lines.append(
            {
                "product_id": line.product_id,
                "name": line.name,
                "quantity": line.quantity,
                "unit_price": money(line.unit_price),
                "subtotal": subtotal,
                "discount": disc,
                "discounted_quantity": dq,
                "total": subtotal - disc,
            }
        )

    subtotal = sum((ln["subtotal"] for ln in out_lines), Decimal("0.00"))
    discount_total = sum(discounts, Decimal("0.00"))
    if ledger.granted:
        logger.debug("cart pass granted units %s", ledger.granted)
    return {
        "coupon_codes": [c.code for c in coupons],
        "lines": out_lines,
        "subtotal": subtotal,
        "discount_total": discount_total,
        "total": subtotal - discount_total,
        "discount_by_coupon": by_coupon,
    }
