"""Structured validation rules supplied by an external proposer.

A rule's predicate is one of a closed set of kinds: ``NotNull``,
``Unique``, ``Regex``, ``Range`` and ``CrossColumn``. Descriptors arrive
as plain dicts, e.g.::

    {"table": "customers", "column": "vat", "type": "REGEX",
     "value": "^[A-Z]{2}[0-9]+$", "description": "VAT format"}
"""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

from valibook.errors import RuleDefinitionError


@dataclass(frozen=True)
class NotNull:
    """Every row must hold a non-empty value."""

    tag = "NOT_NULL"


@dataclass(frozen=True)
class Unique:
    """Non-empty values must not repeat."""

    tag = "UNIQUE"


@dataclass(frozen=True)
class Regex:
    """Non-empty values must match ``pattern`` (searched from the start)."""

    pattern: str
    compiled: re.Pattern = field(init=False, repr=False, compare=False)

    tag = "REGEX"

    def __post_init__(self):
        try:
            object.__setattr__(self, "compiled", re.compile(self.pattern))
        except re.error as e:
            raise RuleDefinitionError(f"Invalid regex {self.pattern!r}: {e}") from e


@dataclass(frozen=True)
class Range:
    """Non-empty values must be numbers within [minimum, maximum]."""

    minimum: Optional[float] = None
    maximum: Optional[float] = None

    tag = "RANGE"

    def __post_init__(self):
        if self.minimum is None and self.maximum is None:
            raise RuleDefinitionError("Range rule needs a minimum or a maximum")
        if (
            self.minimum is not None
            and self.maximum is not None
            and self.minimum > self.maximum
        ):
            raise RuleDefinitionError(
                f"Range minimum {self.minimum} is greater than maximum {self.maximum}"
            )


@dataclass(frozen=True)
class CrossColumn:
    """The column is required when ``depends_on`` is filled.

    With ``when_value`` set, it is only required when ``depends_on``
    equals that value.
    """

    depends_on: str
    when_value: Optional[str] = None

    tag = "CROSS_COLUMN"


Predicate = Union[NotNull, Unique, Regex, Range, CrossColumn]

RULE_TAGS = (
    NotNull.tag,
    Unique.tag,
    Regex.tag,
    Range.tag,
    CrossColumn.tag,
)


@dataclass(frozen=True)
class ValidationRule:
    """A rule bound to one table column. Never mutated once created."""

    id: str
    table: str
    column: str
    predicate: Predicate
    description: str = ""
    severity: str = "ERROR"

    @property
    def rule_type(self) -> str:
        return self.predicate.tag

    @property
    def rule_value(self) -> Optional[str]:
        """Human readable parameter of the predicate, if any."""
        p = self.predicate
        if isinstance(p, Regex):
            return p.pattern
        if isinstance(p, Range):
            low = "" if p.minimum is None else f"{p.minimum:g}"
            high = "" if p.maximum is None else f"{p.maximum:g}"
            return f"{low}..{high}"
        if isinstance(p, CrossColumn):
            if p.when_value is None:
                return p.depends_on
            return f"{p.depends_on}={p.when_value}"
        return None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "table": self.table,
            "column": self.column,
            "type": self.rule_type,
            "description": self.description,
            "severity": self.severity,
        }
        p = self.predicate
        if isinstance(p, Regex):
            data["value"] = p.pattern
        elif isinstance(p, Range):
            data["min"] = p.minimum
            data["max"] = p.maximum
        elif isinstance(p, CrossColumn):
            data["dependsOn"] = p.depends_on
            data["whenValue"] = p.when_value
        return data


def _number(data: Dict[str, Any], key: str) -> Optional[float]:
    value = data.get(key)
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise RuleDefinitionError(f"Range bound {key!r} is not a number: {value!r}") from e


def rule_from_dict(data: Dict[str, Any]) -> ValidationRule:
    """Build a rule from an external descriptor.

    Raises:
        RuleDefinitionError: If the descriptor is incomplete or invalid
    """
    if not isinstance(data, dict):
        raise RuleDefinitionError(f"Rule descriptor must be a mapping, got {data!r}")

    for required in ("table", "column", "type"):
        if not data.get(required):
            raise RuleDefinitionError(f"Rule descriptor is missing {required!r}: {data}")

    tag = str(data["type"]).strip().upper()

    predicate: Predicate
    if tag == NotNull.tag:
        predicate = NotNull()
    elif tag == Unique.tag:
        predicate = Unique()
    elif tag == Regex.tag:
        if not data.get("value"):
            raise RuleDefinitionError(f"REGEX rule needs a 'value' pattern: {data}")
        predicate = Regex(str(data["value"]))
    elif tag == Range.tag:
        predicate = Range(minimum=_number(data, "min"), maximum=_number(data, "max"))
    elif tag == CrossColumn.tag:
        depends_on = data.get("dependsOn") or data.get("depends_on")
        if not depends_on:
            raise RuleDefinitionError(f"CROSS_COLUMN rule needs 'dependsOn': {data}")
        when_value = data.get("whenValue", data.get("when_value"))
        predicate = CrossColumn(
            depends_on=str(depends_on),
            when_value=None if when_value is None else str(when_value),
        )
    else:
        raise RuleDefinitionError(
            f"Unknown rule type {data['type']!r}. Available: {', '.join(RULE_TAGS)}"
        )

    return ValidationRule(
        id=str(data.get("id") or uuid.uuid4().hex[:12]),
        table=str(data["table"]),
        column=str(data["column"]),
        predicate=predicate,
        description=str(data.get("description") or ""),
        severity=str(data.get("severity") or "ERROR").upper(),
    )
