"""Kubernetes resource quantity helpers"""
from decimal import Decimal, ROUND_CEILING
from typing import Optional, Union
from kubernetes.utils import parse_quantity


Quantity = Union[str, int, float, Decimal]


def milli_value(quantity: Quantity) -> int:
    """Return the quantity expressed in whole milli-units, rounded up like the API server does"""
    parsed = parse_quantity(quantity)
    return int((parsed * 1000).to_integral_value(rounding=ROUND_CEILING))


def milli_scaled(quantity: Optional[Quantity]) -> float:
    """Recover the decimal value of a quantity from its milli-unit form.

    A missing quantity reads as zero, matching how an unset quantity
    serializes on the API side.
    """
    if quantity is None or quantity == "":
        return 0.0
    return float(milli_value(quantity)) / 1000
