"""Luhn (mod 10) checksum rule."""

from typing import Any, List, Mapping

from ..errors import ConfigurationError
from ..outcome import Outcome
from .base import Check, DomainValidator, Rule

INVALID_MESSAGE = "is not a valid code"
DIGITS = frozenset("0123456789")


def _identity(value):
    return value


def luhn_valid(code: str) -> bool:
    """
    Return True when ``code`` passes the Luhn checksum.

    Raises:
        ValueError: If ``code`` is empty or holds anything but ASCII digits
    """
    if not code or not set(code) <= DIGITS:
        raise ValueError(f"Luhn code must be a non-empty string of digits, got {code!r}")

    def luhn_digit(n):
        return sum(divmod(n * 2, 10))

    digits = [int(d) for d in code]
    checksum = sum(digits[-1::-2]) + sum(luhn_digit(d) for d in digits[-2::-2])
    return checksum % 10 == 0


class LuhnRule(Rule):
    """Checks a transformed copy of the value; the value itself is untouched."""

    default_message = INVALID_MESSAGE

    def __init__(self):
        super().__init__("checksum", "luhn")

    def evaluate(self, value, params, context) -> Outcome:
        try:
            valid = luhn_valid(str(params["transformer"](value)))
        except (ValueError, TypeError):
            valid = False
        return Outcome.ok() if valid else self.fail(params)


class LuhnValidator(DomainValidator):
    """Options: ``transformer`` (callable applied before the checksum) and ``message``."""

    name = "luhn"
    option_names = frozenset({"transformer", "message"})
    deferred_options = frozenset({"transformer"})

    def __init__(self):
        self._rule = LuhnRule()

    def build_checks(self, options: Mapping[str, Any]) -> List[Check]:
        self.check_options(options)
        transformer = options.get("transformer")
        if transformer is None:
            transformer = _identity
        elif not callable(transformer):
            raise ConfigurationError("Given transformer is not a function")
        params = {"transformer": transformer, "message": options.get("message")}
        return [Check("checksum", self._rule, params)]

    def check_names(self) -> List[str]:
        return ["checksum"]
