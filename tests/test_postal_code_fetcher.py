"""Tests for the postal code dataset fetcher (HTTP is mocked)."""
from unittest.mock import Mock, patch

import pytest
import requests

from field_validation.postal_code_fetcher import (
    I18nApiClient,
    fetch_postal_codes,
    format_table,
    main,
)

INDEX_PAGE = (
    "<html><body>"
    "<a href='/address/data/FR'>FR</a>"
    "<a href='/address/data/AQ'>AQ</a>"
    "<a href='/address/data/US'>US</a>"
    "</body></html>"
)

COUNTRY_DATA = {
    "FR": {"key": "FR", "zip": "\\d{2} ?\\d{3}"},
    "AQ": {"key": "AQ", "name": "ANTARCTICA"},
    "US": {"key": "US", "zip": "(\\d{5})(?:[ \\-](\\d{4}))?"},
}


def fake_response(text=None, data=None):
    response = Mock(text=text)
    response.json.return_value = data
    return response


@pytest.fixture
def client():
    """I18nApiClient whose session serves canned responses."""
    client = I18nApiClient("https://i18n.example.com/")
    session = Mock()

    def get(url, timeout):
        if url.endswith("/address"):
            return fake_response(text=INDEX_PAGE)
        return fake_response(data=COUNTRY_DATA[url.rsplit("/", 1)[1]])

    session.get.side_effect = get
    client.session = session
    return client


class TestI18nApiClient:
    """Test the HTTP client."""

    def test_countries_from_index(self, client):
        """Test that country codes are scraped from the index page."""
        assert client.get_all_countries() == ["FR", "AQ", "US"]
        client.session.get.assert_called_with("https://i18n.example.com/address", timeout=30)

    def test_country_with_zip(self, client):
        """Test that countries with a zip pattern return (key, zip)."""
        assert client.get_country_info("FR") == ("FR", "\\d{2} ?\\d{3}")

    def test_country_without_zip(self, client):
        """Test that countries without postal codes return None."""
        assert client.get_country_info("AQ") is None


class TestFetchPostalCodes:
    """Test concurrent fetching and formatting."""

    def test_rows_sorted_without_empty_countries(self, client):
        """Test that rows are sorted and countries without zip are dropped."""
        rows = fetch_postal_codes(client, pool_size=2)
        assert rows == [("FR", "\\d{2} ?\\d{3}"), ("US", "(\\d{5})(?:[ \\-](\\d{4}))?")]

    def test_http_error(self, client):
        """Test that request failures surface as RuntimeError."""
        client.session.get.side_effect = requests.ConnectionError("down")
        with pytest.raises(RuntimeError, match="Failed to fetch postal codes"):
            fetch_postal_codes(client)

    def test_format_table(self):
        """Test the dataset line format."""
        assert format_table([("FR", "\\d{5}"), ("US", "\\d{5}")]) == "FR;\\d{5}\nUS;\\d{5}\n"


class TestMain:
    """Test the command line entry point."""

    def test_writes_output_file(self, client, tmp_path):
        """Test that main writes a dataset the loader accepts."""
        output = tmp_path / "codes.csv"
        with patch("field_validation.postal_code_fetcher.I18nApiClient", return_value=client):
            assert main(["--output", str(output), "--pool-size", "1"]) == 0

        assert output.read_text().splitlines() == [
            "FR;\\d{2} ?\\d{3}",
            "US;(\\d{5})(?:[ \\-](\\d{4}))?",
        ]
        client.session.close.assert_called_once()

    def test_writes_stdout(self, client, capsys):
        """Test that the table goes to stdout without --output."""
        with patch("field_validation.postal_code_fetcher.I18nApiClient", return_value=client):
            main([])
        assert capsys.readouterr().out.startswith("FR;")
