"""
Pytest configuration and shared fixtures for Stencil tests.
"""

import sys
from collections.abc import Callable, Generator
from pathlib import Path

import pytest
from hypothesis import HealthCheck, settings

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from stencil_core.config import EngineConfig, TemplatesConfig  # noqa: E402
from stencil_core.logging import reset_loggers  # noqa: E402
from stencil_core.template import TemplateEngine, reset_default_engine  # noqa: E402

# Property tests share the autouse reset fixture below
settings.register_profile("stencil", suppress_health_check=[HealthCheck.function_scoped_fixture])
settings.load_profile("stencil")

# =============================================================================
# Path Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def template_dir(tmp_path: Path) -> Path:
    """Return an empty directory for template files."""
    directory = tmp_path / "templates"
    directory.mkdir()
    return directory


@pytest.fixture
def write_template(template_dir: Path) -> Callable[[str, str], Path]:
    """Fixture to write a template file below template_dir."""

    def _write(name: str, source: str) -> Path:
        path = template_dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(source, encoding="utf-8")
        return path

    return _write


# =============================================================================
# Engine Fixtures
# =============================================================================


@pytest.fixture
def engine_config(template_dir: Path) -> EngineConfig:
    """Engine configuration rooted at template_dir, telemetry off."""
    config = EngineConfig(templates=TemplatesConfig(base_dir=str(template_dir)))
    config.telemetry.enabled = False
    return config


@pytest.fixture
def engine(engine_config: EngineConfig) -> TemplateEngine:
    """Fresh engine over the default registries."""
    return TemplateEngine(engine_config)


@pytest.fixture
def render(engine: TemplateEngine) -> Callable[..., str]:
    """Fixture to compile and render a template string in one call."""

    def _render(source: str, context: dict | None = None, **variables: object) -> str:
        return engine.render_string(source, {**(context or {}), **variables})

    return _render


@pytest.fixture(autouse=True)
def reset_global_state() -> Generator[None, None, None]:
    """Reset cached loggers and the default engine around each test."""
    reset_loggers()
    reset_default_engine()
    yield
    reset_loggers()
    reset_default_engine()


# =============================================================================
# Markers Configuration
# =============================================================================


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "property: Property-based tests")
