"""Validation engine: builds the domain validators once and runs their checks."""

import logging
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from .context import FieldContext
from .errors import ConfigurationError
from .outcome import Outcome
from .pipeline import CheckPipeline
from .postal_codes import load_postal_code_table
from .registry import UnknownKeyPolicy
from .rules.base import DomainValidator
from .rules.email import EmailValidator
from .rules.luhn import LuhnValidator
from .rules.phone_number import PhoneNumberValidator
from .rules.postal_code import PostalCodeValidator
from .rules.prefix import HasPrefixValidator
from .rules.social_security import SocialSecurityValidator
from .rules.temporal import DATE, DATETIME, TIME, TemporalValidator
from .rules.url import UrlValidator

logger = logging.getLogger(__name__)


class ValidationEngine:
    """Core validation logic, independent of how records are supplied"""

    def __init__(self, config_loader):
        """
        Initialize the engine: load the postal code dataset and build every
        domain validator with its registries. Nothing here changes afterwards.

        Args:
            config_loader: ConfigLoader instance

        Raises:
            ConfigurationError: If the dataset or a configured default is invalid
        """
        self.config_loader = config_loader
        self.pipeline = CheckPipeline()

        postal_codes = load_postal_code_table(config_loader.get_postal_codes_path())

        validators = [
            TemporalValidator(DATE),
            TemporalValidator(TIME),
            TemporalValidator(DATETIME),
            EmailValidator(
                default_checks=config_loader.get_default_checks("email"),
                extra_burner_domains=config_loader.get_burner_domains(),
            ),
            UrlValidator(default_checks=config_loader.get_default_checks("url")),
            PostalCodeValidator(
                postal_codes,
                unknown_country=config_loader.get_unknown_country_policy(
                    "postal_code", UnknownKeyPolicy.ACCEPT
                ),
            ),
            SocialSecurityValidator(
                unknown_country=config_loader.get_unknown_country_policy(
                    "social_security", UnknownKeyPolicy.REJECT
                ),
            ),
            LuhnValidator(),
            HasPrefixValidator(),
            PhoneNumberValidator(),
        ]
        self.validators: Mapping[str, DomainValidator] = MappingProxyType(
            {v.name: v for v in validators}
        )

        logger.info(
            f"Validation engine ready with {len(self.validators)} validators "
            f"and {len(postal_codes)} postal code countries"
        )

    def get_validator(self, name: str) -> DomainValidator:
        validator = self.validators.get(name)
        if validator is None:
            raise ConfigurationError(
                f"Unknown validator '{name}'. Available: {sorted(self.validators)}"
            )
        return validator

    def validate(
        self,
        validator_name: str,
        value: Any,
        options: Optional[Mapping[str, Any]] = None,
        context: Optional[FieldContext] = None,
    ) -> Outcome:
        """
        Validate one value.

        Args:
            validator_name: e.g. "date", "email", "postal_code"
            value: Value of the type the validator expects (see cast())
            options: Validator options (checks, boundaries, country, message...)
            context: FieldContext for derived boundaries; an empty one is used if omitted

        Returns:
            Outcome carrying the failures to report, if any

        Raises:
            ConfigurationError: For invalid options or unknown validators
        """
        options = dict(options or {})
        validator = self.get_validator(validator_name)
        checks = validator.build_checks(options)
        if context is None:
            context = FieldContext(options=options)
        outcome = self.pipeline.run(value, checks, validator.mode, context)
        return validator.summarize(outcome, options)

    def discover_validators(self) -> Dict[str, Dict[str, Any]]:
        """Describe every validator: its options, checks and default checks."""
        return {name: v.describe() for name, v in self.validators.items()}

    def discover_rulesets(self) -> Dict[str, Dict[str, Any]]:
        """
        Discover configured rulesets with metadata and statistics.

        Returns:
            Dict mapping ruleset_name to {metadata, stats} where stats holds
            total_rules, fields and validators
        """
        result = {}
        for name, ruleset in self.config_loader.get_rulesets().items():
            field_rules = ruleset.get("fields", [])
            result[name] = {
                "metadata": dict(ruleset.get("metadata", {})),
                "stats": {
                    "total_rules": len(field_rules),
                    "fields": sorted({r["field"] for r in field_rules}),
                    "validators": sorted({r["validator"] for r in field_rules}),
                },
            }
        return result
