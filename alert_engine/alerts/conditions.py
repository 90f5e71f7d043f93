"""Threshold condition evaluation.

Usage:
    from alert_engine.alerts.conditions import evaluate

    evaluate(15.0, 10.0, ">")   # True
    evaluate(5.0009, 5.0, "=")  # True, equality uses EQUALITY_EPSILON
"""

import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)

# Tolerance for "=" and "!=" on float metrics
EQUALITY_EPSILON = 1e-3

OPERATORS: dict[str, Callable[[float, float], bool]] = {
    ">": lambda value, threshold: value > threshold,
    "<": lambda value, threshold: value < threshold,
    ">=": lambda value, threshold: value >= threshold,
    "<=": lambda value, threshold: value <= threshold,
    "=": lambda value, threshold: abs(value - threshold) < EQUALITY_EPSILON,
    "!=": lambda value, threshold: abs(value - threshold) >= EQUALITY_EPSILON,
}


def evaluate(value: float, threshold: float, operator: str) -> bool:
    """Check whether `value` satisfies `operator` against `threshold`.

    Never raises. An unknown operator or non-numeric operand is treated as
    "condition not met" so a single malformed rule cannot abort a batch.
    """
    predicate = OPERATORS.get(operator)
    if predicate is None:
        logger.warning("Unknown threshold operator %r", operator)
        return False

    try:
        return bool(predicate(float(value), float(threshold)))
    except (TypeError, ValueError) as e:
        logger.warning("Cannot compare %r %s %r: %s", value, operator, threshold, e)
        return False
