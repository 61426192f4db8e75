import logging

from sqlalchemy import case, select, update
from sqlalchemy.dialects import postgresql, sqlite

from ..core.reconciliation import discounted_units
from ..models.coupon import Coupon, CouponAudit
from ..models.order import Order

logger = logging.getLogger(__name__)


# INSERT con ON CONFLICT DO NOTHING por dialecto
_INSERTS = {"sqlite": sqlite.insert, "postgresql": postgresql.insert}


def insert_ignoring_conflicts(db):
    name = db.get_bind().dialect.name
    try:
        return _INSERTS[name]
    except KeyError:
        raise RuntimeError(f"unsupported database dialect: {name}") from None


def _audit_once(db, coupon_id: int, event: str, notes: str, by_user: str) -> bool:
    """INSERT OR IGNORE sobre coupon_audit; True si la fila es nueva."""
    ins = (
        insert_ignoring_conflicts(db)(CouponAudit)
        .values(coupon_id=coupon_id, event=event, notes=notes, by_user=by_user)
        .on_conflict_do_nothing(index_elements=["coupon_id", "event", "notes"])
    )
    res = db.execute(ins)
    return bool(res.rowcount and res.rowcount > 0)


def mark_coupons_used(db, order: Order, by_user: str = "shop"):
    """
    Conteo nativo de la plataforma: +1 en usage_count por cada cupón de la
    orden. Idempotente por (coupon_id, 'used', 'order:<id>'). El commit lo
    hace el caller.
    """
    for code in sorted(order.coupon_codes):
        coupon_id = db.execute(select(Coupon.id).where(Coupon.code == code)).scalar()
        if coupon_id is None:
            continue
        if _audit_once(db, coupon_id, "used", f"order:{order.id}", by_user):
            db.execute(
                update(Coupon)
                .where(Coupon.id == coupon_id)
                .values(usage_count=Coupon.usage_count + 1)
                .execution_options(synchronize_session=False)
            )


def reconcile(db, order_id: int, by_user: str = "shop") -> bool:
    """
    Corrige usage_count de los cupones "por cantidad" de una orden pagada:
    quita el +1 que sumó la plataforma y suma las unidades descontadas.

    Devuelve True si esta llamada hizo el ajuste; False si la orden no existe
    o ya estaba ajustada. La marca y las correcciones van en la misma
    transacción.
    """
    order = db.get(Order, order_id)
    if order is None:
        logger.warning("reconcile: order %s not found", order_id)
        return False

    # Reclamo atómico de la marca: solo una invocación gana
    claimed = db.execute(
        update(Order)
        .where(Order.id == order_id, Order.usage_adjusted.is_(False))
        .values(usage_adjusted=True)
        .execution_options(synchronize_session=False)
    ).rowcount
    if not claimed:
        logger.debug("reconcile: order %s already adjusted", order_id)
        db.rollback()
        return False

    try:
        units = discounted_units(order.lines)
        for code in sorted(order.coupon_codes):
            coupon = db.execute(select(Coupon).where(Coupon.code == code)).scalar_one_or_none()
            if coupon is None:
                logger.warning("reconcile: coupon %s on order %s no longer exists", code, order_id)
                continue
            if not coupon.count_by_quantity:
                continue
            if units == 0:
                continue

            # read-modify-write en una sola sentencia: max(0, usage_count - 1 + units)
            new_usage = Coupon.usage_count - 1 + units
            db.execute(
                update(Coupon)
                .where(Coupon.id == coupon.id)
                .values(usage_count=case((new_usage < 0, 0), else_=new_usage))
                .execution_options(synchronize_session=False)
            )
            _audit_once(db, coupon.id, "usage_reconciled", f"order:{order_id} units:{units}", by_user)
            logger.info("reconcile: coupon %s order %s counted %s units", code, order_id, units)

        db.commit()
    except Exception:
        db.rollback()
        raise

    db.expire_all()
    return True
