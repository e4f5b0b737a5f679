"""Shared pytest fixtures for press-sync tests."""

from datetime import datetime
from pathlib import Path
from unittest.mock import Mock

import pytest

from press_sync.config import Config
from press_sync.sync.models import (
    MediaItem,
    PostItem,
    RemoteMedia,
    RemotePost,
)


def pytest_addoption(parser):
    """Add custom CLI options for test filtering."""
    parser.addoption(
        "--run-live",
        action="store_true",
        default=False,
        help="Run tests that require a live WordPress site",
    )


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "live: mark test as requiring a live WordPress site"
    )


def pytest_collection_modifyitems(config, items):
    """Skip live tests unless --run-live is passed."""
    if config.getoption("--run-live"):
        return
    skip_live = pytest.mark.skip(reason="need --run-live option to run")
    for item in items:
        if "live" in item.keywords:
            item.add_marker(skip_live)


@pytest.fixture
def mock_config():
    """Create a Config instance for testing."""
    return Config(
        wp_url="https://blog.example.com",
        username="testuser",
        password="testpass",
        insecure=False,
    )


@pytest.fixture
def mock_xml_response():
    """Factory fixture for creating XML-RPC response mocks."""

    def _create_response(content):
        mock_response = Mock()
        mock_response.status_code = 200
        mock_response.content = (
            content.encode() if isinstance(content, str) else content
        )
        return mock_response

    return _create_response


class FakeClient:
    """In-memory publishing client that records every call.

    Post ids are handed out sequentially from 100, media ids from 500.
    Names listed in ``fail_on`` raise ``RuntimeError``.
    """

    def __init__(self, fail_on=(), remote_date=None):
        self.fail_on = set(fail_on)
        self.remote_date = remote_date
        self.calls: list[tuple[str, str]] = []
        self._next_post = 100
        self._next_media = 500

    def _check(self, name: str) -> None:
        if name in self.fail_on:
            raise RuntimeError(f"remote rejected {name}")

    def publish_post(self, post: PostItem) -> RemotePost:
        self.calls.append(("publish_post", post.local_file))
        self._check(post.local_file)
        post_id = str(self._next_post)
        self._next_post += 1
        return RemotePost(
            remote_id=post_id,
            remote_url=f"https://blog.example.com/?p={post_id}",
            remote_date=self.remote_date or post.modified_at,
        )

    def update_post(self, post: PostItem) -> datetime | None:
        self.calls.append(("update_post", post.local_file))
        self._check(post.local_file)
        return self.remote_date or post.modified_at

    def upload_media(self, item: MediaItem, path: Path) -> RemoteMedia:
        self.calls.append(("upload_media", item.local_file))
        self._check(item.local_file)
        path.read_bytes()
        media_id = str(self._next_media)
        self._next_media += 1
        return RemoteMedia(
            remote_id=media_id,
            remote_url=f"https://blog.example.com/uploads/{item.local_file}",
        )


@pytest.fixture
def fake_client():
    """A fresh ``FakeClient`` with no failures configured."""
    return FakeClient()


@pytest.fixture
def content_root(tmp_path: Path) -> Path:
    """A working directory with empty ``posts/`` and ``media/`` dirs."""
    (tmp_path / "posts").mkdir()
    (tmp_path / "media").mkdir()
    return tmp_path


@pytest.fixture
def make_client():
    """Factory fixture for ``FakeClient`` instances with options."""
    return FakeClient
