"""Resolve ``{{fieldName}}`` placeholders in action parameters against a record."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from automation.application.services.condition_evaluator import to_js_string

_PLACEHOLDER_RE = re.compile(r"\{\{(\w+)\}\}")


def substitute_variables(template: Any, record: Mapping[str, Any]) -> Any:
    """Replace each ``{{name}}`` with the record's value for ``name``.

    Placeholders naming a field the record does not have are left verbatim.
    Non-string templates (numbers, lists, None) are returned unchanged.
    """
    if not isinstance(template, str):
        return template

    def _replace(match: re.Match[str]) -> str:
        name = match.group(1)
        if name not in record:
            return match.group(0)
        return to_js_string(record[name])

    return _PLACEHOLDER_RE.sub(_replace, template)
