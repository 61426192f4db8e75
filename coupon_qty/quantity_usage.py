"""
Plugin "contar uso del cupón por cantidad de productos descontados".

Registra dos puntos de entrada en los hooks de la plataforma:
- filtro coupon_discount_amount: limita el descuento de cada línea al
  presupuesto de unidades que le queda al cupón (Allocation Engine);
- acciones order_status_processing / order_status_completed: corrige el
  usage_count de la orden pagada (reconciliación). Puede dispararse dos
  veces por orden; la marca usage_adjusted lo vuelve idempotente.
"""
from .core.allocation import compute_allowed_discount
from .hooks import COUPON_DISCOUNT_AMOUNT, ORDER_STATUS_ACTION
from .services.coupon_usage import reconcile
from .services.orders import PAID_STATUSES


def limit_discount_by_quantity(discount, line, coupon, ledger):
    return compute_allowed_discount(coupon, line, discount, ledger)


def count_usage_by_quantity(db, order_id):
    reconcile(db, order_id)


def install_quantity_usage(hooks):
    hooks.add_filter(COUPON_DISCOUNT_AMOUNT, limit_discount_by_quantity)
    for status in PAID_STATUSES:
        hooks.add_action(ORDER_STATUS_ACTION.format(status=status), count_usage_by_quantity)
