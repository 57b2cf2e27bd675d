"""
Comparison targets for temporal rules and prefixes.

A boundary option can be given as:

- a literal value (``date(2024, 1, 1)``, or an ISO-8601 string from YAML)
- a sentinel naming the current moment (``"utc_today"``, ``"utc_now"``)
- a callable receiving the FieldContext (``lambda ctx: ctx.start + timedelta(30)``)
- a field reference mapping (``{"field": "start"}``), mostly used from YAML

Boundary.coerce() turns any of those into a Boundary. Resolution happens once
per evaluation, right before the comparison; results are never cached.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Callable, Mapping

from .errors import ConfigurationError


class Sentinel(str, Enum):
    UTC_TODAY = "utc_today"
    UTC_NOW = "utc_now"


class Boundary(ABC):
    @abstractmethod
    def resolve(self, context, kind=None, like=None) -> Any:
        """
        Produce the comparison value.

        Args:
            context: FieldContext for derived boundaries
            kind: Optional TemporalKind used to coerce and produce sentinels
            like: The value being compared, so sentinels match its timezone form
        """

    @staticmethod
    def coerce(option: Any) -> "Boundary":
        """Wrap a raw option value in the matching Boundary variant."""
        if isinstance(option, Boundary):
            return option
        if isinstance(option, Sentinel):
            return SentinelBoundary(option)
        if isinstance(option, str) and option in {s.value for s in Sentinel}:
            return SentinelBoundary(Sentinel(option))
        if isinstance(option, Mapping):
            if set(option) != {"field"}:
                raise ConfigurationError(
                    f"Boundary mapping must be {{'field': name}}, got {dict(option)!r}"
                )
            return FieldReference(option["field"])
        if callable(option):
            return Derived(option)
        return Literal(option)


class Literal(Boundary):
    def __init__(self, value: Any):
        self.value = value

    def resolve(self, context, kind=None, like=None) -> Any:
        if kind is None:
            return self.value
        return kind.coerce(self.value)

    def __repr__(self) -> str:
        return f"Literal({self.value!r})"


class SentinelBoundary(Boundary):
    def __init__(self, sentinel: Sentinel):
        self.sentinel = sentinel

    def resolve(self, context, kind=None, like=None) -> Any:
        if kind is None:
            raise ConfigurationError(f"Sentinel {self.sentinel.value!r} needs a temporal type")
        return kind.current(self.sentinel, like)

    def __repr__(self) -> str:
        return f"Sentinel({self.sentinel.value})"


class Derived(Boundary):
    """Boundary computed by a caller-supplied function of the FieldContext."""

    def __init__(self, fn: Callable[[Any], Any]):
        self.fn = fn

    def resolve(self, context, kind=None, like=None) -> Any:
        value = self.fn(context)
        if kind is None:
            return value
        return kind.coerce(value)

    def __repr__(self) -> str:
        return f"Derived({getattr(self.fn, '__name__', self.fn)!r})"


class FieldReference(Derived):
    """Boundary read from a sibling field of the record."""

    def __init__(self, field: str):
        self.field = field
        super().__init__(lambda context: context.get_field(field))

    def __repr__(self) -> str:
        return f"FieldReference({self.field!r})"
