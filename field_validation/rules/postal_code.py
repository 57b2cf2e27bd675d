"""Postal code rules, one compiled pattern per country."""

from typing import Any, List, Mapping, Pattern

from ..outcome import Outcome
from ..registry import RuleRegistry, UnknownKeyPolicy
from .base import Check, DomainValidator, Rule, require_country

INVALID_MESSAGE = "is not a valid postal code"


class PostalCodePatternRule(Rule):
    """Full-string match of the trimmed, uppercased value."""

    default_message = INVALID_MESSAGE

    def __init__(self, country: str, pattern: Pattern):
        super().__init__("pattern", "postal_code")
        self.country = country
        self._pattern = pattern

    def evaluate(self, value, params, context) -> Outcome:
        if self._pattern.fullmatch(value.strip().upper()):
            return Outcome.ok()
        return self.fail(params, country=self.country)


class PostalCodeValidator(DomainValidator):
    """
    Options: ``country`` (required), ``raise_if_unknown_country``,
    ``reject_if_unknown_country`` and ``message``.

    Countries missing from the dataset follow the configured default policy
    (accept, unless the configuration says otherwise).
    """

    name = "postal_code"
    option_names = frozenset(
        {"country", "raise_if_unknown_country", "reject_if_unknown_country", "message"}
    )

    def __init__(
        self,
        table: Mapping[str, Pattern],
        unknown_country: UnknownKeyPolicy = UnknownKeyPolicy.ACCEPT,
    ):
        self.unknown_country = UnknownKeyPolicy.coerce(unknown_country)
        self.countries = RuleRegistry(
            "country code",
            {code: PostalCodePatternRule(code, pattern) for code, pattern in table.items()},
            validation=self.name,
            message=INVALID_MESSAGE,
        )

    def policy_for(self, options: Mapping[str, Any]) -> UnknownKeyPolicy:
        if options.get("raise_if_unknown_country"):
            return UnknownKeyPolicy.RAISE
        if options.get("reject_if_unknown_country"):
            return UnknownKeyPolicy.REJECT
        return self.unknown_country

    def build_checks(self, options: Mapping[str, Any]) -> List[Check]:
        self.check_options(options)
        country = require_country(options, self.name)
        rule = self.countries.lookup(country, self.policy_for(options))
        return [Check("pattern", rule, {"message": options.get("message")})]

    def check_names(self) -> List[str]:
        return ["pattern"]
