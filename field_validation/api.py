"""
Public API for field-validation

This is the "front door": it adapts records (plain mappings of field name to
value) to the validation engine and turns outcomes into error lists.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .config_loader import ConfigLoader
from .context import FieldContext
from .outcome import Failure, Outcome
from .validation_engine import ValidationEngine

logger = logging.getLogger(__name__)

FieldError = Tuple[str, Dict[str, Any]]

CAST_MESSAGE = "is invalid"


class ValidationService:
    """
    Main validation service class.

    Validates single fields, groups of fields, or whole records against
    rulesets defined in configuration.

    Example:
        from field_validation import ValidationService

        service = ValidationService()
        errors = service.validate_field(
            {"start": "2024-01-01", "finish": "2023-12-31"},
            "finish", "date", after={"field": "start"},
        )
        # [("finish", {"message": "should be after %{after}.", "kind": "after",
        #              "metadata": {"validation": "date", "kind": "after",
        #                           "after": datetime.date(2024, 1, 1)}})]
    """

    def __init__(self, config_uri: Optional[str] = None):
        """
        Initialize validation service.

        Args:
            config_uri: Optional configuration override (path, file:// or
                http(s):// URI). The bundled configuration is used otherwise.

        Raises:
            ConfigurationError: If configuration or the postal code dataset is invalid
            RuntimeError: If a remote configuration cannot be fetched
        """
        self.config_uri = config_uri
        self._initialize()

    def _initialize(self):
        """Internal initialization logic (used by __init__ and reload_config)."""
        self.config_loader = ConfigLoader(self.config_uri)
        self.engine = ValidationEngine(self.config_loader)

    def validate_field(
        self, record: Mapping[str, Any], field: str, validator: str, **options
    ) -> List[FieldError]:
        """
        Validate one field of a record.

        Missing fields and None values are not validated. Temporal validators
        accept ISO-8601 strings and parse them first; a value that cannot be
        cast yields a single "is invalid" error instead of running the rules.

        Args:
            record: Mapping of field name to value; siblings are visible to
                derived boundaries through the FieldContext
            field: Field to validate
            validator: Validator name ("date", "email", "postal_code"...)
            **options: Validator options. Any option except boundaries and
                prefixes may be given as {"field": name} to read it from the
                record; the field is skipped when that sibling is empty.

        Returns:
            List of (field, descriptor) tuples; empty when the field is valid.
            descriptor = {"message": template, "kind": kind, "metadata": {...}}

        Raises:
            ConfigurationError: For invalid options or an unknown validator

        Example:
            errors = service.validate_field(
                {"zip": "99130"}, "zip", "postal_code", country="fr"
            )
            # [("zip", {"message": "is not a valid postal code", ...})]
        """
        value = record.get(field)
        if value is None:
            return []

        domain = self.engine.get_validator(validator)
        options = self._resolve_option_references(domain, options, record)
        if options is None:
            logger.debug(f"Skipping '{field}' for {validator}: referenced option field is empty")
            return []

        try:
            value = domain.cast(value)
        except (TypeError, ValueError) as e:
            logger.debug(f"Cannot cast field '{field}' for {validator}: {e}")
            failure = Failure(
                CAST_MESSAGE, "cast", {"validation": "cast", "type": validator}
            )
            return [(field, failure.to_descriptor())]

        context = FieldContext(record, field, options)
        outcome = self.engine.validate(validator, value, options, context)
        return [(field, failure.to_descriptor()) for failure in outcome.failures]

    def validate_many(
        self,
        record: Mapping[str, Any],
        fields: Iterable[str],
        validator: str,
        **options,
    ) -> List[FieldError]:
        """
        Apply the same validator and options to several fields.

        Returns:
            Concatenated errors, in field order

        Example:
            errors = service.validate_many(
                record, ["home_page", "blog"], "url", checks=["parsable", "host"]
            )
        """
        errors = []
        for field in fields:
            errors.extend(self.validate_field(record, field, validator, **options))
        return errors

    def validate(self, record: Mapping[str, Any], ruleset_name: str) -> List[FieldError]:
        """
        Validate a record against a configured ruleset.

        Args:
            record: Mapping of field name to value
            ruleset_name: Ruleset defined under `rulesets` in configuration

        Returns:
            Concatenated errors of every field rule, in ruleset order

        Raises:
            ConfigurationError: If the ruleset is unknown or holds invalid options
        """
        ruleset = self.config_loader.get_ruleset(ruleset_name)
        errors = []
        for rule in ruleset.get("fields", []):
            errors.extend(
                self.validate_field(
                    record, rule["field"], rule["validator"], **rule.get("options", {})
                )
            )
        return errors

    def batch_validate(
        self,
        records: Iterable[Mapping[str, Any]],
        id_fields: List[str],
        ruleset_name: str,
    ) -> List[Dict[str, Any]]:
        """
        Validate multiple records against one ruleset.

        Args:
            records: Record mappings
            id_fields: Field names used to identify each record in results
            ruleset_name: Ruleset to use for all records

        Returns:
            List of per-record results, each containing:
                - entity_id: Extracted record identifier
                - valid: True when the record has no errors
                - errors: List of (field, descriptor) tuples

        Example:
            results = service.batch_validate(customers, ["id"], "contact")
            for result in results:
                if not result["valid"]:
                    print(result["entity_id"], result["errors"])
        """
        results = []
        for record in records:
            errors = self.validate(record, ruleset_name)
            results.append(
                {
                    "entity_id": record_id(record, id_fields),
                    "valid": not errors,
                    "errors": errors,
                }
            )
        return results

    def discover_rulesets(self) -> Dict[str, Dict[str, Any]]:
        """
        Discover all configured rulesets with metadata and statistics.

        Returns:
            Dict mapping ruleset_name to ruleset info:
                - metadata: Ruleset metadata (description, purpose)
                - stats: total_rules, fields, validators
        """
        return self.engine.discover_rulesets()

    def discover_validators(self) -> Dict[str, Dict[str, Any]]:
        """Describe available validators, their options and check names."""
        return self.engine.discover_validators()

    def reload_config(self):
        """
        Reload configuration and rebuild the engine.

        Cached remote configuration is discarded first, so a remote
        config_uri is fetched again.
        """
        self.config_loader.clear_cache()
        self._initialize()
        logger.info("Configuration reloaded")

    def get_config_age(self) -> float:
        """Seconds since the configuration was loaded."""
        return self.config_loader.get_config_age()

    def _resolve_option_references(self, domain, options, record) -> Optional[Dict[str, Any]]:
        """
        Replace {"field": name} option values with the record's value.

        Returns None when a referenced field is missing or empty, in which
        case the field rule is skipped.
        """
        resolved = {}
        for key, value in options.items():
            if (
                key not in domain.deferred_options
                and isinstance(value, Mapping)
                and set(value) == {"field"}
            ):
                value = record.get(value["field"])
                if value is None:
                    return None
            resolved[key] = value
        return resolved


def record_id(record: Mapping[str, Any], id_fields: Iterable[str]) -> str:
    """Join the non-empty id fields of a record with '-', or 'unknown' if none are set."""
    parts = [str(record[f]) for f in id_fields if record.get(f) is not None]
    return "-".join(parts) or "unknown"


_service: Optional[ValidationService] = None


def get_service() -> ValidationService:
    """Get or lazily create the shared ValidationService (bundled configuration)."""
    global _service
    if _service is None:
        _service = ValidationService()
    return _service


def reset_service():
    """Reset the shared service (for testing)."""
    global _service
    _service = None


def validate_value(validator: str, value: Any, **options) -> Outcome:
    """
    Validate a bare value with the shared service.

    Example:
        validate_value("luhn", "740123450").passed  # True
    """
    return get_service().engine.validate(validator, value, options)
