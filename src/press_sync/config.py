"""Connection configuration for the WordPress publishing client.

Reads connection settings from CLI args, environment variables, .env
files, and YAML config file fallbacks.

Precedence (highest to lowest):
    CLI args > Environment variables > .env file > YAML config > Built-in defaults

Environment variables:
    WP_URL: WordPress site URL (required)
    WP_USERNAME: WordPress username (required)
    WP_PASSWORD: WordPress password or application password (required)
    WP_BLOG_ID: Blog id for multisite installs (optional, default: 1)
    WP_INSECURE: Skip SSL verification (optional, default: false)
    WP_DEBUG: Enable debug logging (optional, default: false)
    WP_TIMEOUT: Read timeout in seconds (optional, default: 60)
"""

import logging
import os
from dataclasses import dataclass
from urllib.parse import urlparse

logger = logging.getLogger(__name__)


@dataclass
class Config:
    wp_url: str
    username: str
    password: str
    blog_id: int = 1
    insecure: bool = False
    debug: bool = False
    timeout: int = 60


def validate_config(config: Config) -> None:
    """Validate configuration values and raise ValueError if invalid.

    Args:
        config: Config instance to validate.

    Raises:
        ValueError: If URL format is invalid or credentials are empty.
    """
    config.wp_url = config.wp_url.strip()

    if not config.wp_url.startswith(("http://", "https://")):
        raise ValueError(
            f"Invalid WordPress URL '{config.wp_url}': must start with http:// or https://"
        )

    parsed = urlparse(config.wp_url)
    if not parsed.hostname:
        raise ValueError(
            f"Invalid WordPress URL '{config.wp_url}': URL must include a hostname"
        )

    config.wp_url = config.wp_url.removesuffix("/")

    if not config.username.strip():
        raise ValueError(
            "WordPress username cannot be empty. Set WP_USERNAME environment variable."
        )

    if not config.password.strip():
        raise ValueError(
            "WordPress password cannot be empty. Set WP_PASSWORD environment variable."
        )

    if config.insecure:
        logger.warning(
            "WARNING: SSL verification disabled (insecure=True). Use only for development."
        )


def _get_bool_env(key: str) -> bool | None:
    """Return True/False from env var, or None if unset."""
    val = os.getenv(key)
    if val is None:
        return None
    return val.lower() in ("true", "1", "yes", "on")


def _get_int_env(key: str, low: int, high: int) -> int | None:
    """Return an int from env var within [low, high], or None if unset."""
    raw = os.getenv(key)
    if raw is None:
        return None
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(
            f"Invalid {key} '{raw}': must be a number between {low} and {high}"
        ) from None
    if not (low <= value <= high):
        raise ValueError(
            f"Invalid {key} '{raw}': must be a number between {low} and {high}"
        )
    return value


def load_config(
    url: str | None = None,
    username: str | None = None,
    password: str | None = None,
    insecure: bool = False,
    debug: bool = False,
    yaml_fallbacks: dict | None = None,
) -> Config:
    """Load configuration with unified precedence.

    Resolution order for each field (highest to lowest):
        CLI arg > env var / .env > yaml_fallbacks > built-in default

    The caller is responsible for calling ``load_dotenv()`` before this
    function so that .env values are available via ``os.getenv()``.

    Args:
        url: Override site URL (takes precedence over env var and YAML).
        username: Override username (takes precedence over env var and YAML).
        password: Override password (takes precedence over env var and YAML).
        insecure: Skip SSL verification (CLI flag).
        debug: Enable debug logging (CLI flag).
        yaml_fallbacks: Dict of values from the YAML ``wordpress`` section.
            Used as fallback when CLI arg and env var are both unset.

    Returns:
        Validated Config instance.

    Raises:
        ValueError: If required config (URL, username, password) is missing
            after checking all sources, or a numeric value is out of range.
    """
    fb = yaml_fallbacks or {}

    # --- String fields: CLI > env > YAML > error ---

    wp_url = url or os.getenv("WP_URL") or fb.get("url")
    if not wp_url:
        raise ValueError(
            "WordPress URL not found. Set WP_URL environment variable, "
            "pass --url CLI argument, or add 'url' to config.yml."
        )

    wp_username = username or os.getenv("WP_USERNAME") or fb.get("username")
    if not wp_username:
        raise ValueError(
            "WordPress username not found. Set WP_USERNAME environment variable, "
            "pass --username CLI argument, or add 'username' to config.yml."
        )

    wp_password = password or os.getenv("WP_PASSWORD") or fb.get("password")
    if not wp_password:
        raise ValueError(
            "WordPress password not found. Set WP_PASSWORD environment variable, "
            "pass --password CLI argument, or add 'password' to config.yml."
        )

    # --- Boolean fields: CLI > env > YAML > default ---

    if insecure:
        final_insecure = True
    else:
        env_insecure = _get_bool_env("WP_INSECURE")
        if env_insecure is not None:
            final_insecure = env_insecure
        else:
            final_insecure = bool(fb.get("insecure", False))

    if debug:
        final_debug = True
    else:
        env_debug = _get_bool_env("WP_DEBUG")
        if env_debug is not None:
            final_debug = env_debug
        else:
            final_debug = bool(fb.get("debug", False))

    # --- Numeric fields: env > YAML > default ---

    env_blog_id = _get_int_env("WP_BLOG_ID", 0, 1_000_000)
    if env_blog_id is not None:
        final_blog_id = env_blog_id
    else:
        final_blog_id = int(fb.get("blog_id", 1))

    env_timeout = _get_int_env("WP_TIMEOUT", 1, 600)
    if env_timeout is not None:
        final_timeout = env_timeout
    else:
        final_timeout = int(fb.get("timeout", 60))

    config = Config(
        wp_url=wp_url.strip(),
        username=wp_username.strip(),
        password=wp_password.strip(),
        blog_id=final_blog_id,
        insecure=final_insecure,
        debug=final_debug,
        timeout=final_timeout,
    )

    validate_config(config)

    return config
