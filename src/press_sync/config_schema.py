"""Unified configuration schema for press_sync.

Defines Pydantic models for the unified config structure with dedicated
sections for the WordPress connection, content sync layout and logging.
Credentials are resolved separately by ``config.load_config``, which takes
the ``wordpress`` section as its fallback layer.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


# ---------------------------------------------------------------------------
# Section models
# ---------------------------------------------------------------------------


class WordPressConfig(BaseModel):
    """WordPress connection settings.

    All fields are optional to support zero-config: env vars and CLI args
    can supply them at runtime instead.
    """

    url: str | None = Field(default=None, description="Site URL")
    username: str | None = Field(
        default=None, description="WordPress username"
    )
    password: str | None = Field(
        default=None, description="WordPress (application) password"
    )
    blog_id: int = Field(
        default=1, ge=0, description="Blog id for multisite installs"
    )
    insecure: bool = Field(
        default=False,
        description="Disable SSL verification (development only)",
    )
    timeout: int = Field(
        default=60,
        ge=1,
        le=600,
        description="Read timeout in seconds for XML-RPC calls",
    )

    model_config = {"frozen": True}


class SyncSettings(BaseModel):
    """Where local content and snapshot files live.

    Relative paths are resolved against the working directory.
    """

    posts_dir: str = Field(
        default="posts", description="Directory of markdown posts"
    )
    media_dir: str = Field(
        default="media", description="Directory of media files"
    )
    state_dir: str = Field(
        default=".",
        description="Directory holding posts.json and media.json",
    )
    post_extension: str = Field(
        default=".md", description="Suffix of post files"
    )
    media_extension: str = Field(
        default=".jpg", description="Suffix of media files"
    )

    model_config = {"frozen": True}

    @field_validator("post_extension", "media_extension")
    @classmethod
    def _dotted(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("extension cannot be empty")
        return value if value.startswith(".") else f".{value}"


class LoggingConfig(BaseModel):
    """Logging configuration.

    Attributes:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        file: Optional log file path.
        format: "text" or "json".
    """

    level: str = Field(default="INFO", description="Log level")
    file: str | None = Field(default=None, description="Log file path")
    format: str = Field(default="text", description="text or json")

    model_config = {"frozen": True}


# ---------------------------------------------------------------------------
# Top-level unified config
# ---------------------------------------------------------------------------


class UnifiedConfig(BaseModel):
    """Top-level unified configuration.

    Aggregates all config sections. Every section has sensible defaults,
    so ``UnifiedConfig()`` (zero-config) is always valid.
    """

    wordpress: WordPressConfig = Field(default_factory=WordPressConfig)
    sync: SyncSettings = Field(default_factory=SyncSettings)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"frozen": True}


# ---------------------------------------------------------------------------
# Factory function
# ---------------------------------------------------------------------------


def build_config(raw_data: dict) -> UnifiedConfig:
    """Construct a ``UnifiedConfig`` from the raw dict returned by
    ``load_hierarchical_config()``.

    Handles missing sections gracefully; anything absent gets defaults.

    Args:
        raw_data: Merged configuration dictionary.

    Returns:
        Validated ``UnifiedConfig`` instance.
    """
    if not raw_data:
        return UnifiedConfig()

    return UnifiedConfig(**raw_data)
