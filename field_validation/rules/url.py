"""
URL rules.

Every requested check is evaluated and the failures are reported as a single
``is not a valid url`` error whose metadata lists the failed checks.

- ``parsable``: only RFC 3986 characters, well-formed percent escapes, and a
  netloc (brackets, port) the parser accepts
- ``empty``: at least one URL component is present
- ``scheme`` / ``host`` / ``path``: that component is present
- ``valid_host``: the host resolves in DNS (network call, never a default)
- ``http_regexp``: strict http(s)/ftp pattern that rejects private and
  reserved IPv4 ranges and malformed host labels
"""

import re
import socket
from typing import Any, List, Mapping, Optional
from urllib.parse import SplitResult, urlsplit

from ..outcome import Failure, Outcome
from ..registry import RuleRegistry, UnknownKeyPolicy
from .base import AggregationMode, Check, DomainValidator, Rule, as_check_list

INVALID_MESSAGE = "is not a valid url"

URI_CHARACTERS_REGEX = re.compile(r"[A-Za-z0-9\-._~:/?#\[\]@!$&'()*+,;=%]*")
BAD_ESCAPE_REGEX = re.compile(r"%(?![0-9A-Fa-f]{2})")

# https://mathiasbynens.be/demo/url-regex (dperini)
HTTP_REGEX = re.compile(
    r"(?:(?:https?|ftp):\/\/)"
    r"(?:\S+(?::\S*)?@)?"
    r"(?:"
    r"(?!10(?:\.\d{1,3}){3})"
    r"(?!127(?:\.\d{1,3}){3})"
    r"(?!169\.254(?:\.\d{1,3}){2})"
    r"(?!192\.168(?:\.\d{1,3}){2})"
    r"(?!172\.(?:1[6-9]|2\d|3[0-1])(?:\.\d{1,3}){2})"
    r"(?:[1-9]\d?|1\d\d|2[01]\d|22[0-3])"
    r"(?:\.(?:1?\d{1,2}|2[0-4]\d|25[0-5])){2}"
    r"(?:\.(?:[1-9]\d?|1\d\d|2[0-4]\d|25[0-4]))"
    r"|"
    r"(?:(?:[a-z\u00a1-\uffff0-9]+-?)*[a-z\u00a1-\uffff0-9]+)"
    r"(?:\.(?:[a-z\u00a1-\uffff0-9]+-?)*[a-z\u00a1-\uffff0-9]+)*"
    r"(?:\.(?:[a-z\u00a1-\uffff]{2,}))"
    r")"
    r"(?::\d{2,5})?"
    r"(?:\/[^\s]*)?",
    re.IGNORECASE | re.DOTALL,
)


def split_url(value: str) -> Optional[SplitResult]:
    """Split a URL into components, or None when the parser rejects it."""
    try:
        parts = urlsplit(value)
        parts.port  # validates the port
    except ValueError:
        return None
    return parts


class UrlRule(Rule):
    default_message = INVALID_MESSAGE

    def evaluate(self, value, params, context) -> Outcome:
        if self.check(value, split_url(value)):
            return Outcome.ok()
        return self.fail(params)

    def check(self, value: str, parts: Optional[SplitResult]) -> bool:
        raise NotImplementedError


class ParsableRule(UrlRule):
    def check(self, value, parts):
        return (
            parts is not None
            and URI_CHARACTERS_REGEX.fullmatch(value) is not None
            and BAD_ESCAPE_REGEX.search(value) is None
        )


class EmptyRule(UrlRule):
    def check(self, value, parts):
        if parts is None:
            return False
        return any([parts.scheme, parts.netloc, parts.path, parts.query, parts.fragment])


class SchemeRule(UrlRule):
    def check(self, value, parts):
        return parts is not None and bool(parts.scheme)


class HostRule(UrlRule):
    def check(self, value, parts):
        return parts is not None and bool(parts.hostname)


class PathRule(UrlRule):
    def check(self, value, parts):
        return parts is not None and bool(parts.path)


class ValidHostRule(UrlRule):
    """Resolves the host through DNS. Slow; the caller owns any timeout."""

    def check(self, value, parts):
        if parts is None or not parts.hostname:
            return False
        try:
            socket.gethostbyname(parts.hostname)
        except (OSError, UnicodeError):
            return False
        return True


class HttpRegexpRule(UrlRule):
    def check(self, value, parts):
        return HTTP_REGEX.fullmatch(value) is not None


class UrlValidator(DomainValidator):
    """Options: ``checks`` (default ``[parsable, empty, scheme, host]``) and ``message``."""

    name = "url"
    mode = AggregationMode.ACCUMULATE
    option_names = frozenset({"checks", "message"})

    def __init__(self, default_checks: Optional[List[str]] = None):
        self._default_checks = list(default_checks or ["parsable", "empty", "scheme", "host"])
        self.checks = RuleRegistry(
            "url check",
            {
                "parsable": ParsableRule("parsable", self.name),
                "empty": EmptyRule("empty", self.name),
                "scheme": SchemeRule("scheme", self.name),
                "host": HostRule("host", self.name),
                "valid_host": ValidHostRule("valid_host", self.name),
                "path": PathRule("path", self.name),
                "http_regexp": HttpRegexpRule("http_regexp", self.name),
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

    def summarize(self, outcome: Outcome, options: Mapping[str, Any]) -> Outcome:
        """Collapse failed checks into one url failure listing them."""
        if outcome.passed:
            return outcome
        failed = [f.check for f in outcome.failures]
        metadata = {"validation": self.name, "kind": self.name, "checks": failed}
        message = options.get("message") or INVALID_MESSAGE
        return Outcome((Failure(message, self.name, metadata),))

    def check_names(self) -> List[str]:
        return list(self.checks.keys())

    def default_checks(self) -> List[str]:
        return list(self._default_checks)
