"""
Read-only view of the record a field is validated within.

Derived boundaries and prefixes receive a FieldContext so they can read
sibling fields ("finish must be after start"). Sibling fields are available
both as ``ctx.get_field("start")`` and as attributes (``ctx.start``).
Attribute access does not shadow the context's own members (``field``,
``options``, ``record``); use get_field() for fields with those names.
"""

from types import MappingProxyType
from typing import Any, List, Mapping, Optional


class FieldContext:
    """Read-only access to the record, the field under validation and its options."""

    def __init__(
        self,
        record: Optional[Mapping[str, Any]] = None,
        field: Optional[str] = None,
        options: Optional[Mapping[str, Any]] = None,
        track_access: bool = False,
    ):
        self._record = MappingProxyType(dict(record or {}))
        self._field = field
        self._options = MappingProxyType(dict(options or {}))
        self._track_access = track_access
        self._accesses: dict = {}  # field name -> None, ordered + deduplicated

    @property
    def record(self) -> Mapping[str, Any]:
        return self._record

    @property
    def field(self) -> Optional[str]:
        """Name of the field being validated."""
        return self._field

    @property
    def options(self) -> Mapping[str, Any]:
        return self._options

    @property
    def value(self) -> Any:
        """Current value of the field being validated."""
        return self._record.get(self._field) if self._field else None

    def get_field(self, name: str, default: Any = None) -> Any:
        """Return a sibling field's value, or ``default`` when absent."""
        if self._track_access:
            self._accesses[name] = None
        return self._record.get(name, default)

    def get_accesses(self) -> List[str]:
        """Return the sibling fields read so far, in order of first access."""
        return list(self._accesses)

    def __getattr__(self, name: str) -> Any:
        # Only reached for names that are not real attributes.
        if name.startswith("_"):
            raise AttributeError(name)
        record = self.__dict__.get("_record", {})
        if name not in record:
            raise AttributeError(f"Record has no field '{name}'")
        return self.get_field(name)

    def __repr__(self) -> str:
        return f"FieldContext(field={self._field!r}, fields={sorted(self._record)!r})"
