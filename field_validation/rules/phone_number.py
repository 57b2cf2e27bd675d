"""Phone number rule backed by the phonenumbers library."""

from typing import Any, List, Mapping

import phonenumbers
from phonenumbers import NumberParseException

from ..errors import ConfigurationError
from ..outcome import Outcome
from .base import Check, DomainValidator, Rule

INVALID_MESSAGE = "is not a valid phone number"


class PhoneNumberRule(Rule):
    default_message = INVALID_MESSAGE

    def __init__(self):
        super().__init__("phone_number", "phone_number")

    def evaluate(self, value, params, context) -> Outcome:
        try:
            parsed = phonenumbers.parse(value, params.get("region"))
        except NumberParseException:
            return self.fail(params)
        if phonenumbers.is_valid_number(parsed):
            return Outcome.ok()
        return self.fail(params)


class PhoneNumberValidator(DomainValidator):
    """
    Options: ``country`` (ISO alpha-2, may be empty) and ``message``.

    Without a country only numbers in international format can be parsed.
    """

    name = "phone_number"
    option_names = frozenset({"country", "message"})

    def __init__(self):
        self._rule = PhoneNumberRule()

    def build_checks(self, options: Mapping[str, Any]) -> List[Check]:
        self.check_options(options)
        country = options.get("country") or ""
        if not isinstance(country, str):
            raise ConfigurationError(
                f"country for {self.name} must be a string, got {type(country).__name__}"
            )
        params = {"region": country.strip().upper() or None, "message": options.get("message")}
        return [Check("phone_number", self._rule, params)]

    def check_names(self) -> List[str]:
        return ["phone_number"]
