"""
Email address rules.

Checks (all evaluated, one failure per failing check):

- ``html_input``: the regular expression browsers use for ``<input type="email">``
- ``pow``: structural check of the local part and the domain labels,
  accepting unicode letters
- ``burner``: rejects addresses hosted by disposable-mail providers
"""

import re
import unicodedata
from typing import Any, Iterable, List, Mapping, Optional

from disposable_email_domains import blocklist

from ..outcome import Outcome
from ..registry import RuleRegistry, UnknownKeyPolicy
from .base import AggregationMode, Check, DomainValidator, Rule, as_check_list

INVALID_MESSAGE = "is not a valid email"
BURNER_MESSAGE = "uses a forbidden provider"

# https://html.spec.whatwg.org/multipage/input.html#valid-e-mail-address
HTML_INPUT_REGEX = re.compile(
    r"[a-zA-Z0-9.!#$%&'*+\/=?^_`{|}~-]+"
    r"@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*"
)

ONLY_QUOTED_REGEX = re.compile(r'"[^"]+"')
COMMENTS_REGEX = re.compile(r"(^\(.*\))|(\(.*\)$)")
QUOTES_REGEX = re.compile(r'(^".*"$)|(^".*"\.)|(\.".*"$)')
NUMERIC_REGEX = re.compile(r"[0-9]+")

LOCAL_PART_SYMBOLS = frozenset("!#$%&'*+,-./=?^_`{|}~")
DIGITS = frozenset("0123456789")

MAX_LOCAL_PART = 64
MAX_DOMAIN = 255
MAX_LABEL = 63


def _is_letter_or_mark(char: str) -> bool:
    return unicodedata.category(char)[0] in ("L", "M")


def _local_part_error(local_part: str) -> Optional[str]:
    sanitized = QUOTES_REGEX.sub("", COMMENTS_REGEX.sub("", local_part))
    if ".." in sanitized:
        return "consecutive dots in local-part"
    if not sanitized or not all(
        c in DIGITS or c in LOCAL_PART_SYMBOLS or _is_letter_or_mark(c) for c in sanitized
    ):
        return "invalid characters in local-part"
    return None


def _label_error(label: str) -> Optional[str]:
    if not label:
        return "dns label is too short"
    if len(label) > MAX_LABEL:
        return "dns label too long"
    if label.startswith("-"):
        return "dns label begins with hyphen"
    if label.endswith("-"):
        return "dns label ends with hyphen"
    if not all(c in DIGITS or c == "-" or _is_letter_or_mark(c) for c in label):
        return "invalid characters in dns label"
    return None


def _domain_error(domain: str) -> Optional[str]:
    labels = COMMENTS_REGEX.sub("", domain).split(".")
    if NUMERIC_REGEX.fullmatch(labels[-1]):
        return "tld cannot be all-numeric"
    for label in labels:
        error = _label_error(label)
        if error:
            return error
    return None


def structural_error(email: str) -> Optional[str]:
    """
    Return why ``email`` is structurally invalid, or None when it is valid.

    The address is split at its last ``@``. A local part that is entirely
    quoted is accepted as is; otherwise comments and quoted sections are
    stripped before checking characters.
    """
    local_part, _, domain = email.rpartition("@")
    if len(local_part) > MAX_LOCAL_PART:
        return "local-part too long"
    if len(domain) > MAX_DOMAIN:
        return "domain too long"
    if not local_part:
        return "invalid format"
    if not ONLY_QUOTED_REGEX.fullmatch(local_part):
        error = _local_part_error(local_part)
        if error:
            return error
    return _domain_error(domain)


class HtmlInputRule(Rule):
    default_message = INVALID_MESSAGE

    def evaluate(self, value, params, context) -> Outcome:
        if HTML_INPUT_REGEX.fullmatch(value):
            return Outcome.ok()
        return self.fail(params)


class PowRule(Rule):
    default_message = INVALID_MESSAGE

    def evaluate(self, value, params, context) -> Outcome:
        error = structural_error(value)
        if error is None:
            return Outcome.ok()
        return self.fail(params, reason=error)


class BurnerRule(Rule):
    default_message = BURNER_MESSAGE

    def __init__(self, name: str, validation: str, domains: Iterable[str]):
        super().__init__(name, validation)
        self._domains = frozenset(d.lower() for d in domains)

    def evaluate(self, value, params, context) -> Outcome:
        domain = value.rpartition("@")[2].strip().lower()
        if domain in self._domains:
            return self.fail(params, provider=domain)
        return Outcome.ok()


class EmailValidator(DomainValidator):
    """Options: ``checks`` (default ``[html_input]``) and ``message``."""

    name = "email"
    mode = AggregationMode.ACCUMULATE
    option_names = frozenset({"checks", "message"})

    def __init__(
        self,
        default_checks: Optional[List[str]] = None,
        extra_burner_domains: Iterable[str] = (),
    ):
        self._default_checks = list(default_checks or ["html_input"])
        self.checks = RuleRegistry(
            "email check",
            {
                "html_input": HtmlInputRule("html_input", self.name),
                "pow": PowRule("pow", self.name),
                "burner": BurnerRule(
                    "burner", self.name, set(blocklist) | set(extra_burner_domains)
                ),
            },
            validation=self.name,
        )
        for check in self._default_checks:
            self.checks.lookup(check, UnknownKeyPolicy.RAISE)

    def build_checks(self, options: Mapping[str, Any]) -> List[Check]:
        self.check_options(options)
        names = as_check_list(options.get("checks", self._default_checks), self.name)
        params = {"message": options.get("message")}
        return [
            Check(name, self.checks.lookup(name, UnknownKeyPolicy.RAISE), params)
            for name in names
        ]

    def check_names(self) -> List[str]:
        return list(self.checks.keys())

    def default_checks(self) -> List[str]:
        return list(self._default_checks)
