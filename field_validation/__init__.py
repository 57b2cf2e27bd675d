"""
field-validation: field-level validation rules for record data

This library provides:
- Date, time and datetime comparisons with literal, current-moment or
  derived (cross-field) boundaries
- Email, URL, postal code, phone number, social security number, Luhn and
  prefix validators
- Ordered check pipelines with first-failure or accumulate-all aggregation
- Per-country registries with a configurable unknown-country policy
- YAML rulesets for validating whole records

Example:
    from field_validation import ValidationService

    service = ValidationService()
    errors = service.validate_field({"zip": "75008"}, "zip", "postal_code", country="fr")
"""

from .api import ValidationService, get_service, reset_service, validate_value
from .context import FieldContext
from .errors import ConfigurationError
from .outcome import Failure, Outcome
from .registry import UnknownKeyPolicy

__version__ = "0.1.0"
__all__ = [
    "ValidationService",
    "get_service",
    "reset_service",
    "validate_value",
    "FieldContext",
    "ConfigurationError",
    "Failure",
    "Outcome",
    "UnknownKeyPolicy",
]
