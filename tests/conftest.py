"""
Test Configuration
==================

Pytest configuration with fixtures shared by unit and integration tests.
"""

import pytest
from unittest.mock import patch

from route_prerenderer.config.logging import setup_logging
from route_prerenderer.config.settings import Settings
from pydantic_settings import SettingsConfigDict
from route_prerenderer.models.schemas import RenderOptions

from tests.utils.mocks import MockBrowser, MockStyleSheet


# Test settings override
class TestSettings(Settings):
    """Test-specific settings."""

    environment: str = "testing"
    log_level: str = "DEBUG"
    headless: bool = True

    model_config = SettingsConfigDict(env_file=".env.test", env_prefix="PRERENDER_")


@pytest.fixture(scope="session")
def test_settings() -> TestSettings:
    """Test settings fixture."""
    return TestSettings()


@pytest.fixture(scope="session", autouse=True)
def override_settings(test_settings: TestSettings):
    """Override application settings for testing."""
    with patch("route_prerenderer.config.settings.settings", test_settings):
        setup_logging()
        yield test_settings


@pytest.fixture
def base_url() -> str:
    """Base URL of the mock local server."""
    return "http://localhost:8000"


@pytest.fixture
def mock_browser() -> MockBrowser:
    """Mock browser without stylesheets."""
    return MockBrowser()


@pytest.fixture
def two_style_browser() -> MockBrowser:
    """Mock browser whose pages carry two inline stylesheets, only `.a` applied."""
    return MockBrowser(
        stylesheets=[
            MockStyleSheet("sheet-a", ".a{color:red}", used=[(0, 13)]),
            MockStyleSheet("sheet-b", ".b{color:blue}", used=[], unused=[(0, 14)]),
        ]
    )


@pytest.fixture
def default_options() -> RenderOptions:
    """Render options with every default."""
    return RenderOptions()
