"""
Rule registries keyed by a discriminator (country code or check name).

A registry is built once, when the engine starts, and is read-only afterwards.
Keys are case-normalised on the way in and on lookup. What happens for an
unknown key is chosen per call through UnknownKeyPolicy:

- RAISE: ConfigurationError, for callers where correctness is mandatory
- REJECT: a rule that fails every value
- ACCEPT: a rule that passes every value (the default)
"""

import logging
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterator, Mapping, Optional

from .errors import ConfigurationError
from .outcome import Outcome
from .rules.base import Rule

logger = logging.getLogger(__name__)


class UnknownKeyPolicy(str, Enum):
    RAISE = "raise"
    REJECT = "reject"
    ACCEPT = "accept"

    @classmethod
    def coerce(cls, policy: Any) -> "UnknownKeyPolicy":
        """Accept an UnknownKeyPolicy or its string value."""
        if isinstance(policy, cls):
            return policy
        try:
            return cls(str(policy).lower())
        except ValueError as e:
            raise ConfigurationError(
                f"Unknown key policy must be one of "
                f"{[p.value for p in cls]}, got {policy!r}"
            ) from e


class AcceptAll(Rule):
    """Passes every value."""

    def evaluate(self, value, params, context) -> Outcome:
        return Outcome.ok()


class RejectAll(Rule):
    """Fails every value; a matcher that matches nothing."""

    def evaluate(self, value, params, context) -> Outcome:
        return self.fail(params)


def normalize_key(key: Any) -> str:
    return str(key).strip().lower()


class RuleRegistry:
    """Immutable mapping from discriminator to Rule with an unknown-key fallback."""

    def __init__(
        self,
        name: str,
        entries: Mapping[str, Rule],
        validation: Optional[str] = None,
        message: Optional[str] = None,
    ):
        """
        Build the registry.

        Args:
            name: What the keys are, used in error messages (e.g. 'country code')
            entries: Discriminator -> Rule
            validation: Validator name reported by the fallback rules
            message: Message template reported by the reject fallback

        Raises:
            ConfigurationError: If two keys normalise to the same discriminator
        """
        normalized = {}
        for key, rule in entries.items():
            norm = normalize_key(key)
            if norm in normalized:
                raise ConfigurationError(f"Duplicate {name} in registry: {key!r}")
            normalized[norm] = rule

        self.name = name
        self._entries = MappingProxyType(normalized)
        validation = validation or name
        self._accept = AcceptAll("unknown", validation)
        self._reject = RejectAll("unknown", validation, message=message)

    def lookup(self, key: Any, policy: Any = UnknownKeyPolicy.ACCEPT) -> Rule:
        """
        Resolve a discriminator to a Rule.

        Never fails unless the policy is RAISE and the key is unknown.
        """
        rule = self._entries.get(normalize_key(key))
        if rule is not None:
            return rule

        policy = UnknownKeyPolicy.coerce(policy)
        if policy is UnknownKeyPolicy.RAISE:
            raise ConfigurationError(f"Unknown {self.name}: {key!r}")

        logger.debug(f"Unknown {self.name} {key!r}, falling back to {policy.value}")
        if policy is UnknownKeyPolicy.REJECT:
            return self._reject
        return self._accept

    def keys(self):
        return self._entries.keys()

    def __contains__(self, key: Any) -> bool:
        return normalize_key(key) in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"RuleRegistry({self.name!r}, {len(self)} entries)"
