"""
Registro mínimo de filtros y acciones de la plataforma.

Los filtros transforman un valor (p.ej. el descuento de una línea) y las
acciones notifican eventos (p.ej. order_status_completed). Los plugins se
registran con add_filter/add_action; la plataforma los dispara con
apply_filters/do_action.
"""
from collections import defaultdict
from typing import Callable, Dict, List, Tuple

# nombres usados por la plataforma
COUPON_DISCOUNT_AMOUNT = "coupon_discount_amount"
ORDER_STATUS_ACTION = "order_status_{status}"


class Hooks:
    def __init__(self):
        self._filters: Dict[str, List[Tuple[int, Callable]]] = defaultdict(list)
        self._actions: Dict[str, List[Tuple[int, Callable]]] = defaultdict(list)

    def add_filter(self, name: str, fn: Callable, priority: int = 10) -> None:
        self._filters[name].append((priority, fn))
        self._filters[name].sort(key=lambda p: p[0])

    def add_action(self, name: str, fn: Callable, priority: int = 10) -> None:
        self._actions[name].append((priority, fn))
        self._actions[name].sort(key=lambda p: p[0])

    def apply_filters(self, name: str, value, *args):
        for _, fn in self._filters.get(name, ()):
            value = fn(value, *args)
        return value

    def do_action(self, name: str, *args) -> None:
        for _, fn in self._actions.get(name, ()):
            fn(*args)


hooks = Hooks()
