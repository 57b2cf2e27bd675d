"""Social security number rules, one checksum algorithm per country."""

import re
from typing import Any, List, Mapping

from ..outcome import Outcome
from ..registry import RuleRegistry, UnknownKeyPolicy
from .base import Check, DomainValidator, Rule, require_country

INVALID_MESSAGE = "is not a valid social security number"

# sex, year, month, department (2A/2B for Corsica), commune, order, key
FRANCE_REGEX = re.compile(r"([123478][0-9]{2}[0-9]{2}(2[AB]|[0-9]{2})[0-9]{3}[0-9]{3})([0-9]{2})")
FRANCE_FILTER = re.compile(r"[^0-9AB]")
CORSICA = {"2A": "19", "2B": "18"}


class FrenchSocialSecurityRule(Rule):
    """NIR check: the last two digits are 97 minus the body modulo 97."""

    default_message = INVALID_MESSAGE

    def __init__(self):
        super().__init__("checksum", "social_security")

    def evaluate(self, value, params, context) -> Outcome:
        number = FRANCE_FILTER.sub("", value.upper())
        match = FRANCE_REGEX.fullmatch(number)
        if match is None:
            return self.fail(params)

        body, department, key = match.groups()
        if department in CORSICA:
            body = body.replace(department, CORSICA[department])

        try:
            valid = 97 - int(body) % 97 == int(key)
        except ValueError:
            valid = False
        return Outcome.ok() if valid else self.fail(params)


class SocialSecurityValidator(DomainValidator):
    """Options: ``country`` (required) and ``message``. Unknown countries fail."""

    name = "social_security"
    option_names = frozenset({"country", "message"})

    def __init__(self, unknown_country: UnknownKeyPolicy = UnknownKeyPolicy.REJECT):
        self.unknown_country = UnknownKeyPolicy.coerce(unknown_country)
        self.countries = RuleRegistry(
            "country code",
            {"fr": FrenchSocialSecurityRule()},
            validation=self.name,
            message=INVALID_MESSAGE,
        )

    def build_checks(self, options: Mapping[str, Any]) -> List[Check]:
        self.check_options(options)
        country = require_country(options, self.name)
        rule = self.countries.lookup(country, self.unknown_country)
        return [Check("checksum", rule, {"message": options.get("message")})]

    def check_names(self) -> List[str]:
        return ["checksum"]
