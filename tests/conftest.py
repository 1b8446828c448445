"""Pytest configuration for sharedrive tests."""
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Add src/back to path for src-layout imports
_PROJECT_ROOT = Path(__file__).parent.parent
_SRC_BACK = _PROJECT_ROOT / 'src' / 'back'
if str(_SRC_BACK) not in sys.path:
    sys.path.insert(0, str(_SRC_BACK))

import pytest
from fastapi.testclient import TestClient

from sharedrive.api import APIConfig, ShareLinkRegistry, create_app


class FakeClock:
    """Controllable UTC clock for share expiry tests."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def storage_root(tmp_path):
    """Create an empty storage root for testing."""
    root = tmp_path / 'storage'
    root.mkdir()
    return root.resolve()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def registry(clock):
    return ShareLinkRegistry(clock=clock)


@pytest.fixture
def config(storage_root):
    return APIConfig(
        storage_root=storage_root,
        cors_origins=['*'],
        public_base_url=None,
        static_dir=None,
    )


@pytest.fixture
def app(config, registry):
    """Create the full application bound to the temporary storage root."""
    return create_app(config, registry=registry)


@pytest.fixture
def client(app):
    return TestClient(app)
