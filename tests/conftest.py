"""
Shared pytest fixtures and configuration for the gridbin test suite.

This module provides:
- Hypothesis configuration for property-based testing
- The in-memory blob store and the services built on it
- A Flask app and test client wired to the in-memory store
"""

import pytest

# Hypothesis configuration
from hypothesis import HealthCheck, Phase, settings

from gridbin.app_factory import create_app
from gridbin.application.transfer_service import TransferService
from gridbin.config.settings import AppConfig
from gridbin.domain.file_storage.identifiers import IdentifierGenerator
from gridbin.domain.file_storage.services import FileRegistry
from tests.fixtures import MockBlobStore

# Register Hypothesis profiles
settings.register_profile(
    "default",
    max_examples=100,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.target, Phase.shrink],
)
settings.register_profile(
    "ci",
    max_examples=200,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
)
settings.register_profile(
    "dev",
    max_examples=10,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
)
settings.load_profile("default")

TEST_BASE_URL = "http://files.test"
TEST_MAX_UPLOAD_SIZE = 1024 * 1024


# =============================================================================
# Store and Service Fixtures
# =============================================================================

@pytest.fixture
def blob_store() -> MockBlobStore:
    """Provide an empty in-memory blob store."""
    return MockBlobStore()


@pytest.fixture
def registry(blob_store) -> FileRegistry:
    return FileRegistry(blob_store)


@pytest.fixture
def transfer_service(blob_store, registry) -> TransferService:
    """Provide a TransferService over the in-memory store with a 1 MB limit."""
    return TransferService(
        registry,
        blob_store,
        IdentifierGenerator(),
        max_upload_size=TEST_MAX_UPLOAD_SIZE,
        base_url=TEST_BASE_URL,
    )


# =============================================================================
# Flask Fixtures
# =============================================================================

@pytest.fixture
def app_config() -> AppConfig:
    """Configuration independent of the host environment."""
    return AppConfig(
        environ={},
        max_upload_size=TEST_MAX_UPLOAD_SIZE,
        base_url=TEST_BASE_URL,
    )


@pytest.fixture
def app(app_config, blob_store):
    """Create the full application over the in-memory store."""
    flask_app = create_app(app_config, blob_store=blob_store)
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


# =============================================================================
# Pytest Configuration Hooks
# =============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests (filesystem or MongoDB)"
    )
    config.addinivalue_line(
        "markers", "contract: Contract tests (verify interface compliance)"
    )
    config.addinivalue_line(
        "markers", "property: Property-based tests using Hypothesis"
    )
    config.addinivalue_line(
        "markers", "mongodb: Tests that need a reachable MongoDB server"
    )


def pytest_collection_modifyitems(config, items):
    """
    Automatically mark tests based on their location.

    - tests/unit/* -> @pytest.mark.unit
    - tests/integration/* -> @pytest.mark.integration
    - tests/contracts/* -> @pytest.mark.contract
    - tests/property/* -> @pytest.mark.property
    """
    for item in items:
        test_path = str(item.fspath)

        if "/unit/" in test_path or "\\unit\\" in test_path:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in test_path or "\\integration\\" in test_path:
            item.add_marker(pytest.mark.integration)
        elif "/contracts/" in test_path or "\\contracts\\" in test_path:
            item.add_marker(pytest.mark.contract)
        elif "/property/" in test_path or "\\property\\" in test_path:
            item.add_marker(pytest.mark.property)
