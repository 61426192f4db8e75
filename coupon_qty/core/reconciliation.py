from typing import Iterable


def is_discounted(line) -> bool:
    return line.subtotal > line.total


def discounted_units(lines: Iterable) -> int:
    """Unidades de la orden que realmente recibieron descuento."""
    return sum(int(line.quantity) for line in lines if is_discounted(line))
