"""
Outcome of running checks against a value.

An Outcome with no failures is a pass. Each Failure keeps its message as an
unrendered template (``"should be after %{after}."``) together with the
metadata needed to render it, so callers can translate or format messages
themselves.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

PLACEHOLDER = re.compile(r"%\{(\w+)\}")


@dataclass(frozen=True)
class Failure:
    """A single failed check."""

    message: str
    kind: str
    metadata: Dict[str, Any] = field(default_factory=dict)
    check: Optional[str] = None

    @property
    def validation(self) -> str:
        """Name of the validator that produced this failure (e.g. 'date', 'url')."""
        return self.metadata.get("validation", self.kind)

    def render(self) -> str:
        """Substitute ``%{key}`` placeholders with metadata values."""

        def _substitute(match):
            key = match.group(1)
            if key not in self.metadata:
                return match.group(0)
            return str(self.metadata[key])

        return PLACEHOLDER.sub(_substitute, self.message)

    def to_descriptor(self) -> Dict[str, Any]:
        """Return the failure descriptor handed to the record adapter."""
        return {
            "message": self.message,
            "kind": self.kind,
            "metadata": dict(self.metadata),
        }


@dataclass(frozen=True)
class Outcome:
    """Result of evaluating one rule or a whole check list."""

    failures: Tuple[Failure, ...] = ()

    @classmethod
    def ok(cls) -> "Outcome":
        return cls()

    @classmethod
    def fail(
        cls, message: str, kind: str, check: Optional[str] = None, **metadata
    ) -> "Outcome":
        return cls((Failure(message, kind, metadata, check),))

    @property
    def passed(self) -> bool:
        return not self.failures

    @property
    def first(self) -> Optional[Failure]:
        return self.failures[0] if self.failures else None

    def merge(self, other: "Outcome") -> "Outcome":
        """Concatenate failures, keeping order."""
        if not other.failures:
            return self
        return Outcome(self.failures + other.failures)
