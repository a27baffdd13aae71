"""Per-field validators composed into record-level repair functions.

A Field pairs a type predicate with a default factory. A Record groups
fields (and nested records) and repairs a mapping field by field: values
that pass their predicate are kept verbatim, anything else is replaced by
the field's default. A record whose raw value is not a mapping at all is
defaulted wholesale (or becomes None when the record is nullable).
"""
from __future__ import annotations

import copy
import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Union

Predicate = Callable[[Any], bool]

MISSING = object()


def is_number(value: Any) -> bool:
    # bool is an int subclass; NaN/inf would break equality of repaired state.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def is_bool(value: Any) -> bool:
    return isinstance(value, bool)


def is_str(value: Any) -> bool:
    return isinstance(value, str)


def is_list(value: Any) -> bool:
    return isinstance(value, list)


def constant(value: Any) -> Callable[[], Any]:
    return lambda: copy.deepcopy(value)


@dataclass(frozen=True)
class Field:
    name: str
    check: Predicate
    default: Callable[[], Any]

    def repair(self, value: Any = MISSING) -> Any:
        if value is not MISSING and self.check(value):
            return copy.deepcopy(value)
        return self.default()


# Hook run after field-level repair: (repaired, raw) -> repaired
Finalizer = Callable[[Dict[str, Any], Mapping[str, Any]], Dict[str, Any]]


@dataclass(frozen=True)
class Record:
    name: str
    fields: Tuple[Union[Field, "Record"], ...]
    nullable: bool = False
    finalize: Optional[Finalizer] = None

    def default(self) -> Optional[Dict[str, Any]]:
        if self.nullable:
            return None
        return self.build({})

    def repair(self, value: Any = MISSING) -> Optional[Dict[str, Any]]:
        if not isinstance(value, dict):
            return self.default()
        return self.build(value)

    def build(self, raw: Mapping[str, Any]) -> Dict[str, Any]:
        repaired: Dict[str, Any] = {}
        for child in self.fields:
            repaired[child.name] = child.repair(raw.get(child.name, MISSING))
        if self.finalize is not None:
            repaired = self.finalize(repaired, raw)
        return repaired
