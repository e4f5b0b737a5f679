"""Tests for press_sync.config_schema -- unified Pydantic config models."""

import pytest
from pydantic import ValidationError

from press_sync.config_schema import (
    LoggingConfig,
    SyncSettings,
    UnifiedConfig,
    WordPressConfig,
    build_config,
)

# ---------------------------------------------------------------------------
# build_config
# ---------------------------------------------------------------------------


class TestBuildConfig:
    def test_empty_dict_produces_valid_defaults(self):
        config = build_config({})

        assert config.wordpress.url is None
        assert config.wordpress.blog_id == 1
        assert config.sync.posts_dir == "posts"
        assert config.sync.media_dir == "media"
        assert config.sync.state_dir == "."
        assert config.logging.level == "INFO"

    def test_full_config_with_all_sections(self):
        config = build_config(
            {
                "wordpress": {
                    "url": "https://blog.example.com",
                    "username": "admin",
                    "blog_id": 2,
                    "timeout": 30,
                },
                "sync": {"posts_dir": "content", "state_dir": ".state"},
                "logging": {"level": "DEBUG", "format": "json"},
            }
        )

        assert config.wordpress.url == "https://blog.example.com"
        assert config.wordpress.timeout == 30
        assert config.sync.posts_dir == "content"
        assert config.sync.media_dir == "media"
        assert config.logging.format == "json"

    def test_unknown_sections_ignored(self):
        config = build_config({"plugins": {"x": 1}})
        assert config == UnifiedConfig()

    def test_invalid_values_rejected(self):
        with pytest.raises(ValidationError):
            build_config({"wordpress": {"timeout": 0}})


# ---------------------------------------------------------------------------
# Section models
# ---------------------------------------------------------------------------


class TestWordPressConfig:
    def test_all_fields_optional_zero_config(self):
        wp = WordPressConfig()
        assert wp.username is None
        assert wp.insecure is False

    def test_negative_blog_id_rejected(self):
        with pytest.raises(ValidationError):
            WordPressConfig(blog_id=-1)

    def test_frozen_model(self):
        wp = WordPressConfig()
        with pytest.raises(ValidationError):
            wp.url = "https://other.example.com"


class TestSyncSettings:
    def test_extension_gets_leading_dot(self):
        settings = SyncSettings(post_extension="markdown")
        assert settings.post_extension == ".markdown"

    def test_extension_kept_when_dotted(self):
        settings = SyncSettings(media_extension=".png")
        assert settings.media_extension == ".png"

    def test_empty_extension_rejected(self):
        with pytest.raises(ValidationError, match="cannot be empty"):
            SyncSettings(media_extension="  ")


class TestLoggingConfig:
    def test_defaults(self):
        cfg = LoggingConfig()
        assert cfg.level == "INFO"
        assert cfg.file is None
        assert cfg.format == "text"
