import logging

from fastapi import HTTPException

from ..hooks import ORDER_STATUS_ACTION, hooks as default_hooks
from ..models.order import Order, OrderCoupon, OrderLine
from .cart import calculate_cart, money
from .coupon_usage import mark_coupons_used

logger = logging.getLogger(__name__)

PAID_STATUSES = ("processing", "completed")

TRANSITIONS = {
    "pending": {"processing", "completed", "cancelled"},
    "processing": {"completed", "cancelled"},
    "completed": set(),
    "cancelled": set(),
}


def get_order(db, order_id: int) -> Order:
    order = db.get(Order, order_id)
    if order is None:
        raise HTTPException(status_code=404, detail="ORDER_NOT_FOUND")
    return order


def order_lines_for(ln: dict):
    """
    Una línea descontada solo en parte se guarda como dos líneas: las unidades
    con descuento y las que pagan precio completo. Así subtotal > total marca
    exactamente las unidades descontadas.
    """
    quantity = ln["quantity"]
    dq = ln["discounted_quantity"]

    def _line(qty, subtotal, total):
        return OrderLine(
            product_id=ln["product_id"],
            name=ln["name"],
            quantity=qty,
            unit_price=ln["unit_price"],
            subtotal=subtotal,
            total=total,
        )

    if not 0 < dq < quantity:
        return [_line(quantity, ln["subtotal"], ln["total"])]

    discounted_sub = money(ln["unit_price"] * dq)
    full_sub = ln["subtotal"] - discounted_sub
    return [
        _line(dq, discounted_sub, discounted_sub - ln["discount"]),
        _line(quantity - dq, full_sub, full_sub),
    ]


def place_order(db, items, coupon_codes, hooks=None) -> Order:
    cart = calculate_cart(db, items, coupon_codes, hooks=hooks)

    order = Order(
        status="pending",
        subtotal=cart["subtotal"],
        discount_total=cart["discount_total"],
        total=cart["total"],
        usage_adjusted=False,
    )
    for ln in cart["lines"]:
        order.lines.extend(order_lines_for(ln))
    for code, applied in cart["discount_by_coupon"].items():
        order.coupons.append(OrderCoupon(code=code, discount_applied=applied))

    db.add(order)
    db.commit()
    db.refresh(order)
    logger.info("order %s placed total=%s coupons=%s", order.id, order.total, cart["coupon_codes"])
    return order


def set_order_status(db, order_id: int, status: str, hooks=None) -> Order:
    """
    Cambia el estado y, si la orden queda pagada, registra el uso nativo
    (+1 por cupón) y dispara order_status_<status> ya con el commit hecho.
    """
    hooks = hooks or default_hooks
    order = get_order(db, order_id)
    if status == order.status:
        return order
    if status not in TRANSITIONS.get(order.status, set()):
        raise HTTPException(status_code=400, detail="INVALID_STATUS_TRANSITION")

    order.status = status
    if status in PAID_STATUSES:
        mark_coupons_used(db, order)
    db.commit()
    logger.info("order %s -> %s", order_id, status)

    hooks.do_action(ORDER_STATUS_ACTION.format(status=status), db, order_id)

    db.refresh(order)
    return order
