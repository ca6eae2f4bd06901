"""Pytest configuration and fixtures."""

import pytest
import tempfile
import os
from unittest.mock import Mock

from bigtable_broker.config import Config, DatabaseConfig


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    with tempfile.NamedTemporaryFile(suffix='.db', delete=False) as f:
        db_path = f.name

    yield db_path

    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def test_config(temp_db):
    """Create test configuration."""
    config = Config()
    config.database = DatabaseConfig(
        type="sqlite",
        sqlite_path=temp_db
    )
    config.api.debug = True
    config.logging.level = "DEBUG"
    config.gcp.project_id = "test-project"
    return config


@pytest.fixture
def mock_bigtable_client():
    """Mock Bigtable admin client for testing."""
    client = Mock()
    instance = Mock()
    cluster = Mock()
    operation = Mock()

    client.instance.return_value = instance
    instance.cluster.return_value = cluster
    instance.create.return_value = operation
    operation.result.return_value = None
    instance.delete.return_value = None
    return client


@pytest.fixture
def fixed_name_generator():
    """Name generator returning a known name."""
    generator = Mock()
    generator.instance_name_with_separator.return_value = "brave-otter-a1b2c3"
    return generator
