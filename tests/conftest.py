import logging

import pytest

from model_validation import ModelMetadataProvider, ObjectModelValidator, ValidationConfig
from model_validation.models import json_schema_loader


@pytest.fixture
def provider():
    return ModelMetadataProvider()


@pytest.fixture
def config():
    return ValidationConfig()


@pytest.fixture
def validator(provider, config):
    return ObjectModelValidator(provider, config)


@pytest.fixture(autouse=True)
def reset_package_logging():
    yield
    # the CLI binds handlers to the captured streams of the test that ran it
    logging.getLogger("model_validation").handlers.clear()
    json_schema_loader.clear_cache()
