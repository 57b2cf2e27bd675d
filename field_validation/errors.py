"""Exceptions raised by field-validation.

Validation failures are never raised; they come back as data (see outcome.py).
Only programming mistakes abort a call.
"""


class ConfigurationError(ValueError):
    """Invalid option, unknown discriminator under a raise policy, or bad config file."""
