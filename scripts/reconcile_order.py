import sys

from coupon_qty.db import SessionLocal
from coupon_qty.models.order import Order
from coupon_qty.services.coupon_usage import reconcile

"""
Re-ejecuta la corrección de uso por cantidad para una orden pagada.
Idempotente: si la orden ya tiene usage_adjusted no cambia nada.
Uso: python scripts/reconcile_order.py <ORDER_ID>
"""


def main():
    if len(sys.argv) < 2:
        print("Usage: reconcile_order.py <ORDER_ID>")
        raise SystemExit(2)
    order_id = int(sys.argv[1])

    s = SessionLocal()
    try:
        order = s.get(Order, order_id)
        if order is None:
            print(f"ORDER_NOT_FOUND -> order={order_id}")
            raise SystemExit(1)
        if order.status not in ("processing", "completed"):
            print(f"SKIP -> order={order_id} status={order.status} (not paid)")
            return
        done = reconcile(s, order_id, by_user="script")
        print(f"RECONCILE -> order={order_id} adjusted={'yes' if done else 'already'}")
    finally:
        s.close()


if __name__ == "__main__":
    main()
