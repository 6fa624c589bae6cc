"""Condition evaluation: one field/operator/value test, and the left-fold chain.

Record values come from a loosely typed record store (JSON documents written
by a JavaScript front end), so comparisons follow that store's coercion rules:
``contains`` compares string forms, the ordering operators compare numeric
casts where anything non-numeric is NaN, and equality never coerces. Nothing
here raises; an unknown operator or a failed cast makes the test False.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping, Sequence
from datetime import datetime
from decimal import Decimal
from numbers import Real
from typing import Any

from automation.application.dtos.workflow import MISSING, WorkflowCondition
from automation.domain.enums import ConditionOperator, LogicOperator

_DECIMAL_RE = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")
_RADIX_RE = {
    16: re.compile(r"0[xX][0-9a-fA-F]+"),
    8: re.compile(r"0[oO][0-7]+"),
    2: re.compile(r"0[bB][01]+"),
}


def _is_number(value: Any) -> bool:
    return isinstance(value, Real | Decimal) and not isinstance(value, bool)


def to_js_string(value: Any) -> str:
    """String form of a record value, as the record store's String() would give."""
    if value is MISSING:
        return "undefined"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if _is_number(value):
        number = float(value)
        if math.isnan(number):
            return "NaN"
        if math.isinf(number):
            return "Infinity" if number > 0 else "-Infinity"
        if number.is_integer() and abs(number) < 1e21:
            return str(int(number))
        return repr(number)
    if isinstance(value, Sequence):
        return ",".join(
            "" if item is None or item is MISSING else to_js_string(item)
            for item in value
        )
    if isinstance(value, Mapping):
        return "[object Object]"
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def to_number(value: Any) -> float:
    """Numeric cast of a record value; NaN when the value is not numeric."""
    if value is MISSING:
        return math.nan
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if _is_number(value):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        if text in ("Infinity", "+Infinity"):
            return math.inf
        if text == "-Infinity":
            return -math.inf
        if _DECIMAL_RE.fullmatch(text):
            return float(text)
        for base, pattern in _RADIX_RE.items():
            if pattern.fullmatch(text):
                return float(int(text[2:], base))
        return math.nan
    if isinstance(value, datetime):
        return value.timestamp() * 1000
    if isinstance(value, Sequence):
        if len(value) == 0:
            return 0.0
        if len(value) == 1:
            return to_number(to_js_string(value))
    return math.nan


def strict_equals(left: Any, right: Any) -> bool:
    """Equality without coercion: 1 == 1.0, but True != 1 and "1" != 1."""
    if left is MISSING or right is MISSING or left is None or right is None:
        return left is right
    if isinstance(left, bool) or isinstance(right, bool):
        return type(left) is type(right) and left == right
    if _is_number(left) and _is_number(right):
        return left == right
    if isinstance(left, list | dict) or isinstance(right, list | dict):
        return left is right
    return type(left) is type(right) and left == right


def _same_value_zero(left: Any, right: Any) -> bool:
    if _is_number(left) and _is_number(right):
        if math.isnan(float(left)) and math.isnan(float(right)):
            return True
    return strict_equals(left, right)


def is_empty(value: Any) -> bool:
    """True for missing/None, "", an empty list, and other falsy scalars (0, False, NaN)."""
    if value is MISSING or value is None:
        return True
    if isinstance(value, bool):
        return not value
    if _is_number(value):
        number = float(value)
        return number == 0 or math.isnan(number)
    if isinstance(value, str):
        return value == ""
    if isinstance(value, list | tuple):
        return len(value) == 0
    return False


def is_not_empty(value: Any) -> bool:
    """True for any present, truthy value; an empty list is not 'not empty'."""
    if value is MISSING or value is None:
        return False
    if isinstance(value, bool):
        return value
    if _is_number(value):
        number = float(value)
        return number != 0 and not math.isnan(number)
    if isinstance(value, str):
        return value != ""
    if isinstance(value, list | tuple):
        return len(value) > 0
    return True


def _compare(field_value: Any, compare_value: Any, op: ConditionOperator) -> bool:
    left = to_number(field_value)
    right = to_number(compare_value)
    # NaN compares False for every ordering operator.
    match op:
        case ConditionOperator.GREATER_THAN:
            return left > right
        case ConditionOperator.LESS_THAN:
            return left < right
        case ConditionOperator.GREATER_OR_EQUAL:
            return left >= right
        case _:
            return left <= right


def evaluate(field_value: Any, operator: ConditionOperator | str, compare_value: Any) -> bool:
    """Evaluate one operator against a record field value. Never raises."""
    try:
        op = ConditionOperator(operator)
    except ValueError:
        return False

    match op:
        case ConditionOperator.EQUALS:
            return strict_equals(field_value, compare_value)
        case ConditionOperator.NOT_EQUALS:
            return not strict_equals(field_value, compare_value)
        case ConditionOperator.CONTAINS:
            return to_js_string(compare_value) in to_js_string(field_value)
        case ConditionOperator.NOT_CONTAINS:
            return to_js_string(compare_value) not in to_js_string(field_value)
        case (
            ConditionOperator.GREATER_THAN
            | ConditionOperator.LESS_THAN
            | ConditionOperator.GREATER_OR_EQUAL
            | ConditionOperator.LESS_OR_EQUAL
        ):
            return _compare(field_value, compare_value, op)
        case ConditionOperator.IS_EMPTY:
            return is_empty(field_value)
        case ConditionOperator.IS_NOT_EMPTY:
            return is_not_empty(field_value)
        case ConditionOperator.IN:
            return isinstance(compare_value, list) and any(
                _same_value_zero(item, field_value) for item in compare_value
            )
        case ConditionOperator.NOT_IN:
            return isinstance(compare_value, list) and not any(
                _same_value_zero(item, field_value) for item in compare_value
            )
    return False


def evaluate_all(record: Mapping[str, Any], conditions: Sequence[WorkflowCondition]) -> bool:
    """Fold a rule's conditions left to right into one boolean.

    Each condition's ``logic_operator`` decides how the *next* condition is
    combined with the running result, not how the condition itself is
    combined. So ``[A (OR), B]`` is ``(True AND A) OR B``, and the last
    condition's logic_operator is never used. Rule authors mixing AND and OR
    should order conditions with this in mind.
    """
    if not conditions:
        return True

    result = True
    current_logic: LogicOperator | str = LogicOperator.AND
    for condition in conditions:
        field_value = record.get(condition.field, MISSING)
        condition_result = evaluate(
            field_value, condition.operator, condition.compare_value
        )
        if current_logic == LogicOperator.AND:
            result = result and condition_result
        else:
            result = result or condition_result
        current_logic = condition.logic_operator or LogicOperator.AND
    return result
