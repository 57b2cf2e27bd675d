"""String prefix rule."""

from typing import Any, List, Mapping

from ..boundary import Boundary, Derived, Literal
from ..outcome import Outcome
from .base import Check, DomainValidator, Rule

INVALID_MESSAGE = "is not prefixed by %{prefix}."


def prefix_boundary(option: Any) -> Boundary:
    """Wrap a ``prefix`` option; strings are always literal here."""
    if isinstance(option, Boundary):
        return option
    if isinstance(option, Mapping):
        return Boundary.coerce(option)
    if callable(option):
        return Derived(option)
    return Literal(option)


class HasPrefixRule(Rule):
    default_message = INVALID_MESSAGE

    def __init__(self):
        super().__init__("has_prefix", "has_prefix")

    def evaluate(self, value, params, context) -> Outcome:
        prefix = params["prefix"].resolve(context)
        prefix = "" if prefix is None else str(prefix)
        separator = params.get("separator")
        if separator:
            prefix += separator

        if value.startswith(prefix):
            return Outcome.ok()
        return self.fail(params, prefix=prefix)


class HasPrefixValidator(DomainValidator):
    """
    Options: ``prefix`` (string, callable of the FieldContext, or
    ``{"field": name}``), ``separator`` and ``message``.

    A missing prefix counts as the empty string, so only the separator
    (if any) is required.
    """

    name = "has_prefix"
    option_names = frozenset({"prefix", "separator", "message"})
    deferred_options = frozenset({"prefix"})

    def __init__(self):
        self._rule = HasPrefixRule()

    def build_checks(self, options: Mapping[str, Any]) -> List[Check]:
        self.check_options(options)
        params = {
            "prefix": prefix_boundary(options.get("prefix")),
            "separator": options.get("separator"),
            "message": options.get("message"),
        }
        return [Check("has_prefix", self._rule, params)]

    def check_names(self) -> List[str]:
        return ["has_prefix"]
