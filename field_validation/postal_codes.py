"""
Postal-code dataset loading.

The dataset is a line-oriented table, one country per line::

    FR;(?:0[1-9]|[1-8]\\d|9[0-8]) ?\\d{3}

The first field is a two-letter country code (case-insensitive). The second
is a regular expression body without anchors; it is compiled as ``^body$``.
Blank lines and lines starting with ``#`` are ignored. Anything else that is
not a valid record is a load-time ConfigurationError naming the line.
"""

import logging
import re
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Pattern, Union

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

DELIMITER = ";"
COUNTRY_CODE_REGEX = re.compile(r"[A-Za-z]{2}")


def parse_postal_code_table(text: str, source: str = "<string>") -> Mapping[str, Pattern]:
    """
    Parse dataset text into an immutable country -> compiled pattern mapping.

    Args:
        text: Dataset contents
        source: Name used in error messages

    Returns:
        Read-only mapping keyed by lowercase country code

    Raises:
        ConfigurationError: On malformed lines, anchored bodies, duplicate
            country codes, or patterns that do not compile
    """
    table = {}
    for line_number, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue

        where = f"{source}:{line_number}"
        if DELIMITER not in line:
            raise ConfigurationError(f"{where}: expected 'CC{DELIMITER}regex', got {line!r}")

        country, body = line.split(DELIMITER, 1)
        country = country.strip()
        if not COUNTRY_CODE_REGEX.fullmatch(country):
            raise ConfigurationError(f"{where}: invalid country code {country!r}")
        if not body:
            raise ConfigurationError(f"{where}: empty pattern for {country}")
        if body.startswith("^") or body.endswith("$"):
            raise ConfigurationError(
                f"{where}: pattern for {country} must not carry ^/$ anchors"
            )

        key = country.lower()
        if key in table:
            raise ConfigurationError(f"{where}: duplicate country code {country}")

        try:
            table[key] = re.compile(f"^(?:{body})$")
        except re.error as e:
            raise ConfigurationError(f"{where}: invalid pattern for {country}: {e}") from e

    return MappingProxyType(table)


def load_postal_code_table(path: Union[str, Path]) -> Mapping[str, Pattern]:
    """Load and compile the dataset file at ``path``."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Cannot read postal code dataset {path}: {e}") from e

    table = parse_postal_code_table(text, source=str(path))
    logger.info(f"Loaded {len(table)} postal code patterns from {path.name}")
    return table
