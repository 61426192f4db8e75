"""
Reparto del presupuesto de un cupón "por cantidad" entre las líneas del carrito.

Un cupón con usage_limit=N en modo cantidad descuenta como máximo N unidades
entre todos los pedidos. Dentro de un cálculo del carrito (una "pasada") las
líneas comparten el presupuesto restante; el AllocationLedger lleva cuántas
unidades ya se concedieron en esa pasada. Cada pasada crea su propio ledger.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional, Sequence


@dataclass
class CartLine:
    product_id: int
    quantity: int
    unit_price: Decimal
    name: Optional[str] = None

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass
class AllocationLedger:
    """Unidades ya concedidas por código de cupón dentro de una sola pasada."""

    granted: Dict[str, int] = field(default_factory=dict)

    def allocated(self, code: str) -> int:
        return self.granted.get(code, 0)

    def grant(self, code: str, units: int) -> None:
        self.granted[code] = self.granted.get(code, 0) + units


def compute_allowed_discount(coupon, line, proposed, ledger: AllocationLedger):
    """
    Devuelve el descuento que realmente se aplica a `line`.

    `coupon` expone code, usage_limit, usage_count y count_by_quantity;
    `line` expone quantity. Si solo cabe parte de la línea en el presupuesto,
    el descuento se escala proporcionalmente a las unidades concedidas.
    """
    if not coupon.count_by_quantity or not coupon.usage_limit:
        return proposed

    remaining = coupon.usage_limit - (coupon.usage_count or 0)
    if remaining <= 0:
        return 0

    quantity = line.quantity
    if quantity <= 0:
        return 0

    capacity = remaining - ledger.allocated(coupon.code)
    if capacity <= 0:
        return 0

    granted = min(quantity, capacity)
    ledger.grant(coupon.code, granted)

    # un descuento negativo no se escala ni se recorta
    if granted < quantity and proposed > 0:
        return proposed * granted / quantity
    return proposed


def allocation_sequence(lines: Sequence[CartLine], order: str = "price_desc") -> List[int]:
    """Índices de `lines` en el orden en que reciben presupuesto."""
    idx = list(range(len(lines)))
    if order == "price_desc":
        # sorted es estable: a igual precio se respeta el orden del carrito
        idx.sort(key=lambda i: lines[i].unit_price, reverse=True)
    return idx
