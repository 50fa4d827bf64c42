"""Pytest configuration and fixtures for sqlite_value tests."""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Generator

import pytest
from prometheus_client import CollectorRegistry

from sqlite_value.adapters.outbound import create_bridge
from sqlite_value.application import BackupPolicy, DurabilityCopier, ExecutionAdapter
from sqlite_value.domain.value_objects import EngineImage
from sqlite_value.infrastructure.config import BackupConfig, BridgeConfig, Config
from sqlite_value.infrastructure.container import Container
from sqlite_value.infrastructure.metrics import MetricsRegistry
from sqlite_value.ports.outbound import ImageBridge

SAMPLE_SCRIPT = (
    "CREATE TABLE t(a INTEGER, b TEXT);"
    "INSERT INTO t VALUES (1, 'x'), (2, 'y')"
)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_config(temp_dir: Path) -> Config:
    """Provide a test configuration with a private handle directory."""
    return Config(
        bridge=BridgeConfig(strategy="memory", temp_dir=temp_dir / "handles"),
        backup=BackupConfig(
            pages_per_step=5,
            retry_sleep_seconds=0.05,  # Faster for tests
            max_retries=10,
        ),
    )


@pytest.fixture
def metrics_registry() -> MetricsRegistry:
    """Provide a fresh metrics registry for each test."""
    # Use a separate registry to avoid conflicts between tests
    registry = CollectorRegistry(auto_describe=True)
    return MetricsRegistry(registry=registry)


@pytest.fixture(params=["memory", "tempfile"])
def bridge(request: pytest.FixtureRequest, temp_dir: Path) -> ImageBridge:
    """Provide each bridge strategy in turn."""
    return create_bridge(BridgeConfig(strategy=request.param, temp_dir=temp_dir))


@pytest.fixture
def adapter(bridge: ImageBridge, metrics_registry: MetricsRegistry) -> ExecutionAdapter:
    return ExecutionAdapter(bridge, metrics=metrics_registry)


@pytest.fixture
def backup_policy() -> BackupPolicy:
    """Short retry sleep so lock tests finish quickly."""
    return BackupPolicy(pages_per_step=5, retry_sleep_seconds=0.05, max_retries=10)


@pytest.fixture
def copier(
    bridge: ImageBridge,
    backup_policy: BackupPolicy,
    metrics_registry: MetricsRegistry,
) -> DurabilityCopier:
    return DurabilityCopier(bridge, policy=backup_policy, metrics=metrics_registry)


@pytest.fixture
def sample_image(adapter: ExecutionAdapter) -> EngineImage:
    """An image holding table t(a INTEGER, b TEXT) with two rows."""
    return adapter.init(SAMPLE_SCRIPT)


@pytest.fixture
def container(
    test_config: Config, metrics_registry: MetricsRegistry
) -> Generator[Container, None, None]:
    """Install a container wired for tests as the process-wide one."""
    test_config.ensure_directories()
    c = Container.build(test_config, metrics=metrics_registry)
    Container.install(c)
    yield c
    Container.reset()


# Markers for test categories
def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "slow: Slow tests")
