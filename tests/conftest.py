# listing-qa/tests/conftest.py
#
# Test bootstrap for pytest: ensure repository root is on sys.path so tests can import
# the `listing_qa` package without requiring PYTHONPATH to be explicitly set by the caller.
#
# Fixture Organization:
# - This file: Core fixtures (repo_root, config, catalog, context, log capture)
# - tests/factories.py: Test data builders (RecordFactory, RuleFactory, LookupFactory)
#
from __future__ import annotations

import sys
from pathlib import Path

import pytest
from loguru import logger


def _find_repo_root(start: Path | None = None) -> Path:
    """
    Walk upwards from `start` (defaults to this file's parent) until a likely
    repository root is found. Heuristics:
      - presence of pyproject.toml
      - presence of a `listing_qa` directory
      - presence of a .git directory

    Falls back to one level up from this file if nothing is found.
    """
    if start is None:
        start = Path(__file__).resolve().parent

    current = start
    root_marker_names = ("pyproject.toml", "listing_qa", ".git")
    while True:
        for marker in root_marker_names:
            if (current / marker).exists():
                return current
        if current.parent == current:
            break
        current = current.parent

    return Path(__file__).resolve().parents[1]


_repo_root = _find_repo_root()
_repo_root_str = str(_repo_root)

# Insert repo root into sys.path if not already present, at highest priority.
if _repo_root_str not in sys.path:
    sys.path.insert(0, _repo_root_str)

# Configure test logging using loguru for consistency with application code
logger.remove()
logger.add(
    sys.stderr,
    level="INFO",
    format="{time:YYYY-MM-DD HH:mm:ss} {level} {name}: {message}",
)

from listing_qa.config.loader import get_config  # noqa: E402
from listing_qa.config.schemas import EngineConfig  # noqa: E402
from listing_qa.context import ValidationContext, build_context  # noqa: E402
from listing_qa.repositories.memory import InMemoryCatalogRepository  # noqa: E402
from tests.factories import LookupFactory  # noqa: E402


def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line(
        "markers",
        "fast: Fast unit tests that should complete in < 1 second",
    )
    config.addinivalue_line(
        "markers",
        "integration: Tests that exercise several components together",
    )


@pytest.fixture(scope="session")
def repo_root() -> Path:
    """Return the repository root Path for tests that read project files."""
    return _repo_root


@pytest.fixture(autouse=True)
def _clear_config_cache():
    """Keep cached configuration from leaking between tests."""
    get_config.cache_clear()
    yield
    get_config.cache_clear()


@pytest.fixture
def engine_config() -> EngineConfig:
    """Default configuration with a small batch size so batching is exercised."""
    config = EngineConfig()
    config.runtime.batch_size = 2
    config.runtime.max_workers = 2
    return config


@pytest.fixture
def log_messages():
    """Capture loguru messages emitted during a test."""
    messages: list[str] = []
    handler_id = logger.add(lambda message: messages.append(str(message)), level="DEBUG")
    yield messages
    logger.remove(handler_id)


@pytest.fixture(scope="session")
def seed_path(repo_root: Path) -> Path:
    return repo_root / "config" / "rules" / "default_rules.yaml"


@pytest.fixture
def seed_catalog(seed_path: Path) -> InMemoryCatalogRepository:
    """Catalog loaded from the shipped default seed."""
    return InMemoryCatalogRepository.from_yaml(seed_path)


@pytest.fixture
def empty_context(engine_config: EngineConfig) -> ValidationContext:
    """Context with no rules, brands or lookups."""
    return build_context([], [], [], engine_config)


@pytest.fixture
def lookup_context(engine_config: EngineConfig) -> ValidationContext:
    """Context with generic and brand-scoped color/size lookups and two brands."""
    entries = [
        LookupFactory.create(category="color_map", source_value="Navy", target_value="Blue"),
        LookupFactory.create(
            category="color_map", source_value="Navy", target_value="Navy Blue", brand="CECE"
        ),
        LookupFactory.create(category="size_map", source_value="M", target_value="Medium"),
        LookupFactory.create(category="department", source_value="Womens", target_value="womens"),
    ]
    return build_context([], ["CECE", "Vince Camuto"], entries, engine_config)
