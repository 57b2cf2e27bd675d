"""
Date, time and datetime comparison rules.

The three validators share one structure. Checks run in a fixed order
(``is``, then ``after``, then ``before``) and the first failure wins.
Absent options are skipped.

- ``is`` passes when the value is within ``delta`` of the boundary (inclusive).
  ``delta`` is in days for dates and in seconds for times and datetimes.
- ``after`` and ``before`` are strict: a value equal to the boundary fails.
"""

import logging
from datetime import date, datetime, time, timedelta, timezone
from numbers import Real
from typing import Any, List, Mapping, Optional

from ..boundary import Boundary, Derived, Sentinel
from ..errors import ConfigurationError
from ..outcome import Outcome
from .base import AggregationMode, Check, DomainValidator, Rule

logger = logging.getLogger(__name__)

MESSAGES = {
    "is": "should be %{is}.",
    "after": "should be after %{after}.",
    "before": "should be before %{before}.",
}

# Anchor day used to subtract two times of day.
_REFERENCE_DAY = date(2000, 1, 1)


class TemporalKind:
    """Type-specific behaviour for one of date, time or datetime."""

    name = ""
    unit = "seconds"
    sentinel = Sentinel.UTC_NOW

    def accepts(self, value: Any) -> bool:
        raise NotImplementedError

    def parse(self, text: str) -> Any:
        raise NotImplementedError

    def now(self, like: Any) -> Any:
        raise NotImplementedError

    def difference(self, a: Any, b: Any) -> timedelta:
        return a - b

    def coerce(self, raw: Any) -> Any:
        """Return ``raw`` as this kind, parsing ISO-8601 strings. None stays None."""
        if raw is None or self.accepts(raw):
            return raw
        if isinstance(raw, str):
            try:
                return self.parse(raw)
            except ValueError as e:
                raise ConfigurationError(f"Cannot parse {raw!r} as a {self.name}") from e
        raise ConfigurationError(
            f"{self.name} boundary must be a {self.name}, got {type(raw).__name__}"
        )

    def current(self, sentinel: Sentinel, like: Any = None) -> Any:
        """Resolve a current-moment sentinel."""
        if sentinel is not self.sentinel:
            raise ConfigurationError(
                f"Sentinel {sentinel.value!r} is not available for {self.name}; "
                f"use {self.sentinel.value!r}"
            )
        return self.now(like)

    def tolerance(self, delta: Any) -> timedelta:
        """Convert a ``delta`` option to a non-negative timedelta."""
        if delta is None:
            return timedelta(0)
        if isinstance(delta, timedelta):
            tolerance = delta
        elif isinstance(delta, Real) and not isinstance(delta, bool):
            tolerance = timedelta(**{self.unit: delta})
        else:
            raise ConfigurationError(
                f"delta for {self.name} must be a number of {self.unit}, got {delta!r}"
            )
        if tolerance < timedelta(0):
            raise ConfigurationError(f"delta for {self.name} must not be negative, got {delta!r}")
        return tolerance

    def __repr__(self) -> str:
        return f"TemporalKind({self.name})"


class DateKind(TemporalKind):
    name = "date"
    unit = "days"
    sentinel = Sentinel.UTC_TODAY

    def accepts(self, value):
        return isinstance(value, date) and not isinstance(value, datetime)

    def parse(self, text):
        return date.fromisoformat(text)

    def now(self, like):
        return datetime.now(timezone.utc).date()


class TimeKind(TemporalKind):
    name = "time"

    def accepts(self, value):
        return isinstance(value, time)

    def parse(self, text):
        return time.fromisoformat(text.replace("Z", "+00:00"))

    def now(self, like):
        now = datetime.now(timezone.utc)
        if isinstance(like, time) and like.tzinfo is not None:
            return now.timetz()
        return now.time()

    def difference(self, a, b):
        return datetime.combine(_REFERENCE_DAY, a) - datetime.combine(_REFERENCE_DAY, b)


class DateTimeKind(TemporalKind):
    name = "datetime"

    def accepts(self, value):
        return isinstance(value, datetime)

    def parse(self, text):
        return datetime.fromisoformat(text.replace("Z", "+00:00"))

    def now(self, like):
        now = datetime.now(timezone.utc)
        if isinstance(like, datetime) and like.utcoffset() is None:
            return now.replace(tzinfo=None)
        return now


DATE = DateKind()
TIME = TimeKind()
DATETIME = DateTimeKind()


class TemporalRule(Rule):
    """Compares the value against a boundary resolved at evaluation time."""

    def __init__(self, name: str, kind: TemporalKind):
        super().__init__(name, kind.name, kind=name, message=MESSAGES[name])
        self._temporal = kind

    def evaluate(self, value, params, context) -> Outcome:
        kind = self._temporal
        if not kind.accepts(value):
            raise ConfigurationError(
                f"{kind.name} validator cannot compare a {type(value).__name__}"
            )

        boundary = params["boundary"]
        if isinstance(boundary, Derived):
            # Derived boundaries are record data: a bad sibling value is a
            # failure of this field, not a configuration error.
            raw = boundary.resolve(context)
            try:
                target = kind.coerce(raw)
            except ConfigurationError as e:
                logger.debug(f"Unusable {self._name} boundary {raw!r}: {e}")
                return self.fail(params, **{self._name: raw}, reason=str(e))
        else:
            target = boundary.resolve(context, kind, like=value)

        if target is None:
            # Boundary read from an empty sibling field.
            return Outcome.ok()

        try:
            passed = self.compare(value, target, params)
        except TypeError as e:
            # Naive and aware values cannot be ordered.
            logger.debug(f"Cannot compare {value!r} with {target!r}: {e}")
            return self.fail(params, **{self._name: target}, reason=str(e))

        if passed:
            return Outcome.ok()
        return self.fail(params, **{self._name: target})

    def compare(self, value, target, params) -> bool:
        raise NotImplementedError


class IsRule(TemporalRule):
    def __init__(self, kind: TemporalKind):
        super().__init__("is", kind)

    def compare(self, value, target, params):
        return abs(self._temporal.difference(value, target)) <= params["delta"]


class AfterRule(TemporalRule):
    def __init__(self, kind: TemporalKind):
        super().__init__("after", kind)

    def compare(self, value, target, params):
        return value > target


class BeforeRule(TemporalRule):
    def __init__(self, kind: TemporalKind):
        super().__init__("before", kind)

    def compare(self, value, target, params):
        return value < target


class TemporalValidator(DomainValidator):
    """Validator for one temporal kind: options ``is``, ``after``, ``before``, ``delta``."""

    mode = AggregationMode.FIRST_FAILURE
    option_names = frozenset({"is", "after", "before", "delta", "message"})
    deferred_options = frozenset({"is", "after", "before"})
    ORDER = ("is", "after", "before")

    def __init__(self, kind: TemporalKind):
        self.kind = kind
        self.name = kind.name
        self._rules = {
            "is": IsRule(kind),
            "after": AfterRule(kind),
            "before": BeforeRule(kind),
        }

    def build_checks(self, options: Mapping[str, Any]) -> List[Check]:
        self.check_options(options)
        tolerance = self.kind.tolerance(options.get("delta"))
        message: Optional[str] = options.get("message")

        checks = []
        for name in self.ORDER:
            option = options.get(name)
            if option is None:
                continue
            params = {"boundary": Boundary.coerce(option), "message": message}
            if name == "is":
                params["delta"] = tolerance
            checks.append(Check(name, self._rules[name], params))
        return checks

    def cast(self, value: Any) -> Any:
        if self.kind.accepts(value):
            return value
        if isinstance(value, str):
            return self.kind.parse(value)
        raise TypeError(f"{self.name} expects a {self.name}, got {type(value).__name__}")

    def check_names(self) -> List[str]:
        return list(self.ORDER)

    def default_checks(self) -> List[str]:
        return []
