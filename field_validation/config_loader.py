"""Configuration loading with URI fetching, caching and schema validation."""

import hashlib
import json
import logging
import os
import time
import urllib.parse
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests
import yaml
from importlib.resources import files
from jsonschema import ValidationError, validate

from .errors import ConfigurationError
from .registry import UnknownKeyPolicy

logger = logging.getLogger(__name__)


class ConfigLoader:
    """Loads the bundled configuration, optionally overlaid by a local or remote file."""

    CACHE_DIR = Path.home() / ".cache" / "field-validation"
    REQUEST_TIMEOUT = 30

    def __init__(self, config_uri: Optional[str] = None):
        """
        Initialize config loader.

        Args:
            config_uri: Optional override. Accepts a relative or absolute path,
                a file:// URI, or an http(s):// URI (fetched once and cached
                under ~/.cache/field-validation). Top-level keys missing from
                the override are taken from the bundled validation-config.yaml.

        Raises:
            ConfigurationError: If the resulting configuration fails the schema
            RuntimeError: If the override cannot be read or fetched
        """
        bundled = files("field_validation").joinpath("validation-config.yaml")
        self.bundled_config_path = str(bundled)
        self.config_uri = config_uri
        self.cache_dir = self.CACHE_DIR

        with bundled.open("r") as f:
            config = yaml.safe_load(f)

        self._override_dir: Optional[str] = None
        if config_uri:
            override = self._load_config_from_uri(config_uri)
            if not isinstance(override, dict):
                raise ConfigurationError(f"Configuration at {config_uri} must be a mapping")
            config = {**config, **override}

        self._validate(config)
        self.config = config
        self.config_loaded_at = time.time()

        logger.info(
            f"Configuration loaded from {config_uri or 'bundled validation-config.yaml'}",
            extra={"rulesets": sorted(self.config.get("rulesets", {}))},
        )

    def _validate(self, config: Dict[str, Any]) -> None:
        """Validate the configuration against the bundled JSON schema."""
        schema_file = files("field_validation").joinpath("config.schema.json")
        with schema_file.open("r") as f:
            schema = json.load(f)

        try:
            validate(instance=config, schema=schema)
        except ValidationError as e:
            error_path = " -> ".join(str(p) for p in e.path) if e.path else "root"
            raise ConfigurationError(
                f"Invalid configuration at {error_path}: {e.message}"
            ) from e

    def _load_yaml(self, path: str) -> Any:
        """Load YAML file from disk."""
        try:
            with open(path) as f:
                return yaml.safe_load(f)
        except OSError as e:
            raise RuntimeError(f"Failed to read config from {path}: {e}") from e

    def _load_config_from_uri(self, uri: str) -> Any:
        """
        Load config from URI (with caching).

        Supports:
        - Relative and absolute paths
        - file:// - Local filesystem
        - https:// and http:// - Remote, cached by URI hash
        """
        parsed = urllib.parse.urlparse(uri)

        if not parsed.scheme or len(parsed.scheme) == 1:
            # Plain path (a one-letter scheme is a Windows drive)
            path = os.path.abspath(uri)
            self._override_dir = os.path.dirname(path)
            return self._load_yaml(path)

        if parsed.scheme == "file":
            path = urllib.parse.unquote(parsed.path)
            self._override_dir = os.path.dirname(path)
            return self._load_yaml(path)

        if parsed.scheme in ("http", "https"):
            cache_key = hashlib.sha256(uri.encode()).hexdigest()
            cache_path = self.cache_dir / f"config_{cache_key}.yaml"

            if cache_path.exists():
                logger.debug(f"Using cached config for {uri}")
                return self._load_yaml(str(cache_path))

            content = self._fetch_uri(uri)
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            cache_path.write_text(content)
            return yaml.safe_load(content)

        raise ConfigurationError(f"Unsupported URI scheme: {parsed.scheme} in {uri}")

    def _fetch_uri(self, uri: str) -> str:
        """Fetch content from an HTTP/HTTPS URI."""
        try:
            response = requests.get(uri, timeout=self.REQUEST_TIMEOUT)
            response.raise_for_status()
        except requests.RequestException as e:
            raise RuntimeError(f"Failed to fetch config from {uri}: {e}") from e
        return response.text

    def clear_cache(self) -> None:
        """Remove cached remote configs so the next load fetches them again."""
        if not self.cache_dir.exists():
            return
        for cached in self.cache_dir.glob("config_*.yaml"):
            cached.unlink()

    def get_config(self) -> Dict[str, Any]:
        return self.config

    def get_config_age(self) -> float:
        """Seconds since the configuration was loaded."""
        return time.time() - self.config_loaded_at

    def get_postal_codes_path(self) -> Path:
        """
        Resolve the postal code dataset path.

        Relative paths are looked up next to an override config file first,
        then inside the package.
        """
        configured = self.config["postal_codes_file"]
        if os.path.isabs(configured):
            return Path(configured)

        if self._override_dir:
            candidate = Path(self._override_dir) / configured
            if candidate.exists():
                return candidate

        return Path(str(files("field_validation").joinpath(configured)))

    def get_validator_defaults(self, validator: str) -> Dict[str, Any]:
        return self.config.get("defaults", {}).get(validator, {})

    def get_default_checks(self, validator: str) -> Optional[List[str]]:
        return self.get_validator_defaults(validator).get("checks")

    def get_burner_domains(self) -> List[str]:
        return self.get_validator_defaults("email").get("burner_domains", [])

    def get_unknown_country_policy(
        self, validator: str, default: UnknownKeyPolicy = UnknownKeyPolicy.ACCEPT
    ) -> UnknownKeyPolicy:
        policy = self.get_validator_defaults(validator).get("unknown_country")
        return UnknownKeyPolicy.coerce(policy) if policy else default

    def get_fetcher_config(self) -> Dict[str, Any]:
        return self.config.get("fetcher", {})

    def get_rulesets(self) -> Dict[str, Dict[str, Any]]:
        return self.config.get("rulesets", {})

    def get_ruleset(self, name: str) -> Dict[str, Any]:
        """Return one ruleset or raise ConfigurationError if it is not defined."""
        rulesets = self.get_rulesets()
        if name not in rulesets:
            raise ConfigurationError(
                f"Unknown ruleset '{name}'. Available: {sorted(rulesets)}"
            )
        return rulesets[name]
