"""
Abstract base classes for rules and domain validators.

A Rule implements one atomic check (``before``, ``scheme``, ``pattern``...).
A DomainValidator turns the options a caller passes for one field into an
ordered list of Checks, picks the aggregation mode, and shapes the resulting
failures. The validation engine runs the checks through the CheckPipeline.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional

from ..errors import ConfigurationError
from ..outcome import Failure, Outcome


class AggregationMode(str, Enum):
    """How a pipeline combines the results of several checks."""

    FIRST_FAILURE = "first_failure"
    ACCUMULATE = "accumulate"


class Rule(ABC):
    """
    Abstract base class for all rules.

    Rules are stateless: everything that varies per call arrives through
    ``params`` and ``context``. The name, validation and kind given at
    construction only shape the failures the rule reports.
    """

    default_message = "is invalid"

    def __init__(
        self,
        name: str,
        validation: str,
        kind: Optional[str] = None,
        message: Optional[str] = None,
    ):
        """
        Initialize the rule.

        Args:
            name: Check name this rule implements (e.g. 'before', 'scheme')
            validation: Validator the rule belongs to (e.g. 'date', 'url')
            kind: Failure kind reported; defaults to the validation name
            message: Message template; defaults to the class default_message
        """
        self._name = name
        self._validation = validation
        self._kind = kind or validation
        self._message = message or self.default_message

    def get_name(self) -> str:
        """Return the check name (e.g. 'before')."""
        return self._name

    @abstractmethod
    def evaluate(self, value: Any, params: Mapping[str, Any], context) -> Outcome:
        """
        Evaluate the rule.

        Args:
            value: The value under validation (never mutated)
            params: Per-check parameters built by the domain validator
            context: FieldContext giving read-only access to sibling fields

        Returns:
            Outcome.ok() or a failing Outcome. Malformed input must produce a
            failure; only configuration mistakes raise ConfigurationError.
        """

    def fail(self, params: Mapping[str, Any], **metadata) -> Outcome:
        """Build a failing Outcome, honouring a caller ``message`` override."""
        message = params.get("message") or self._message
        metadata = {"validation": self._validation, "kind": self._kind, **metadata}
        return Outcome((Failure(message, self._kind, metadata, self._name),))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._validation}:{self._name})"


@dataclass(frozen=True)
class Check:
    """One entry of an ordered check list: a rule plus its parameters."""

    name: str
    rule: Rule
    params: Dict[str, Any] = field(default_factory=dict)


class DomainValidator(ABC):
    """Translates caller options for one validator into a check list."""

    name: str = ""
    mode: AggregationMode = AggregationMode.FIRST_FAILURE
    option_names: frozenset = frozenset({"message"})
    # Options that are read lazily by rules (boundaries, prefixes) and so may
    # hold callables or field references.
    deferred_options: frozenset = frozenset()

    @abstractmethod
    def build_checks(self, options: Mapping[str, Any]) -> List[Check]:
        """Return the ordered checks to run for the given options."""

    def summarize(self, outcome: Outcome, options: Mapping[str, Any]) -> Outcome:
        """Shape the pipeline result into the failures this validator reports."""
        return outcome

    def cast(self, value: Any) -> Any:
        """
        Convert a raw record value to the type the rules expect.

        Raises:
            ValueError or TypeError: If the value cannot be cast
        """
        if not isinstance(value, str):
            raise TypeError(f"{self.name} expects a string, got {type(value).__name__}")
        return value

    def check_names(self) -> List[str]:
        """Return the check names this validator can run."""
        return []

    def default_checks(self) -> List[str]:
        return self.check_names()

    def check_options(self, options: Mapping[str, Any]) -> None:
        """Reject option keys this validator does not understand."""
        unknown = sorted(set(options) - set(self.option_names))
        if unknown:
            raise ConfigurationError(
                f"Unknown option(s) for {self.name}: {', '.join(unknown)}"
            )

    def describe(self) -> Dict[str, Any]:
        """Return discovery metadata for this validator."""
        return {
            "name": self.name,
            "mode": self.mode.value,
            "options": sorted(self.option_names),
            "checks": self.check_names(),
            "default_checks": self.default_checks(),
        }


def require_country(options: Mapping[str, Any], validator_name: str) -> str:
    """Return the normalised ``country`` option or raise when it is missing."""
    country = options.get("country")
    if not country:
        raise ConfigurationError(f"No country specified for {validator_name}")
    if not isinstance(country, str):
        raise ConfigurationError(
            f"country for {validator_name} must be a string, got {type(country).__name__}"
        )
    return country


def as_check_list(checks: Any, validator_name: str) -> List[str]:
    """Validate a ``checks`` option and return it as a list of names."""
    if isinstance(checks, str) or not isinstance(checks, Iterable):
        raise ConfigurationError(
            f"checks for {validator_name} must be a list of check names"
        )
    return [str(check) for check in checks]
