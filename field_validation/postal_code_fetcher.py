"""
Postal Code Dataset Fetcher

Maintenance tool that rebuilds data/postal_codes.csv from Google's i18n
address metadata service (https://i18napis.appspot.com/address).

The service lists one page per country; each country record is JSON with a
``key`` (country code) and, for countries that use postal codes, a ``zip``
regular expression. Countries without ``zip`` are skipped. Records are
fetched concurrently and written sorted by country code, one ``CC;regex``
line each.

This is not used at validation time: the engine only reads the dataset file.

Usage:
    python -m field_validation.postal_code_fetcher
    python -m field_validation.postal_code_fetcher --output field_validation/data/postal_codes.csv
"""

import argparse
import logging
import re
import sys
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Tuple

import requests

from .config_loader import ConfigLoader
from .postal_codes import DELIMITER, parse_postal_code_table

logger = logging.getLogger(__name__)

COUNTRY_LINK_REGEX = re.compile(r"<a href='/address/data/([A-Z]{2})'>")


class I18nApiClient:
    """HTTP client for the i18n address metadata service."""

    def __init__(self, base_url: str = "https://i18napis.appspot.com", timeout: float = 30):
        """
        Initialize client.

        Args:
            base_url: Service root, without trailing slash
            timeout: Per-request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()

    def get_all_countries(self) -> List[str]:
        """Return the country codes listed on the service's address index page."""
        response = self.session.get(f"{self.base_url}/address", timeout=self.timeout)
        response.raise_for_status()
        return COUNTRY_LINK_REGEX.findall(response.text)

    def get_country_info(self, country: str) -> Optional[Tuple[str, str]]:
        """
        Return (key, zip regex) for a country, or None when it has no postal codes.
        """
        response = self.session.get(
            f"{self.base_url}/address/data/{country}", timeout=self.timeout
        )
        response.raise_for_status()
        data = response.json()
        if "key" in data and "zip" in data:
            return data["key"], data["zip"]
        return None

    def close(self) -> None:
        self.session.close()


def fetch_postal_codes(client: I18nApiClient, pool_size: int = 10) -> List[Tuple[str, str]]:
    """
    Fetch every country's postal code regex concurrently.

    Returns:
        (country, regex) pairs sorted by country code

    Raises:
        RuntimeError: If the service cannot be reached or returns an error
    """
    try:
        countries = client.get_all_countries()
        logger.info(f"Fetching postal code patterns for {len(countries)} countries")
        with ThreadPoolExecutor(max_workers=pool_size) as executor:
            infos = list(executor.map(client.get_country_info, countries))
    except (requests.RequestException, ValueError) as e:
        raise RuntimeError(f"Failed to fetch postal codes from {client.base_url}: {e}") from e

    return sorted(info for info in infos if info is not None)


def format_table(rows: List[Tuple[str, str]]) -> str:
    """Render rows as dataset text, one ``CC;regex`` line each."""
    return "".join(f"{country}{DELIMITER}{regex}\n" for country, regex in rows)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the fetcher."""
    fetcher_config = ConfigLoader().get_fetcher_config()

    parser = argparse.ArgumentParser(
        description="Fetch postal code patterns from the i18n address metadata service",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Example usage:
  python -m field_validation.postal_code_fetcher
  python -m field_validation.postal_code_fetcher --output field_validation/data/postal_codes.csv
        """,
    )
    parser.add_argument("--output", help="Write the table to this file instead of stdout")
    parser.add_argument(
        "--base-url",
        default=fetcher_config.get("base_url", "https://i18napis.appspot.com"),
        help="Service root URL",
    )
    parser.add_argument(
        "--pool-size",
        type=int,
        default=fetcher_config.get("pool_size", 10),
        help="Concurrent requests",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging to stderr")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    client = I18nApiClient(args.base_url, timeout=fetcher_config.get("timeout_seconds", 30))
    try:
        rows = fetch_postal_codes(client, pool_size=args.pool_size)
    finally:
        client.close()

    table = format_table(rows)
    # Same checks the engine applies at load time
    parse_postal_code_table(table, source=args.base_url)

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(table)
        logger.info(f"Wrote {len(rows)} countries to {args.output}")
    else:
        sys.stdout.write(table)
    return 0


if __name__ == "__main__":
    sys.exit(main())
