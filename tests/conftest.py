"""Shared fixtures for field-validation tests."""
import pytest

from field_validation import ValidationService
from field_validation.config_loader import ConfigLoader
from field_validation.validation_engine import ValidationEngine


@pytest.fixture(scope="session")
def config_loader():
    """ConfigLoader reading the bundled configuration."""
    return ConfigLoader()


@pytest.fixture(scope="session")
def engine(config_loader):
    """ValidationEngine built from the bundled configuration."""
    return ValidationEngine(config_loader)


@pytest.fixture
def service():
    """Create a ValidationService instance for testing."""
    return ValidationService()
