"""
Configuration for the blog tools.

Settings are read from, lowest priority first:
1. Built-in defaults
2. blog.yaml in the working directory (or the path passed in)
3. .env files: ~/.env, ./.env, ./local.env (KEY=value lines)
4. The process environment

Keys:
    PRISMIC_API_ENDPOINT   e.g. https://my-repo.cdn.prismic.io/api/v2
    PRISMIC_ACCESS_TOKEN   only needed for private repositories
    BLOG_HOME_PAGE_SIZE    posts on the first index page (default 1)
    BLOG_PATHS_PAGE_SIZE   posts pre-rendered at build time (default 20)
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

from .errors import ConfigError
from .posts import HOME_PAGE_SIZE, PATHS_PAGE_SIZE
from .prismic import PrismicClient

CONFIG_FILE = Path("blog.yaml")
ENV_FILES = [Path.home() / ".env", Path(".env"), Path("local.env")]
KEYS = (
    "PRISMIC_API_ENDPOINT",
    "PRISMIC_ACCESS_TOKEN",
    "BLOG_HOME_PAGE_SIZE",
    "BLOG_PATHS_PAGE_SIZE",
)


@dataclass
class BlogConfig:
    """Resolved settings."""
    api_endpoint: Optional[str] = None
    access_token: Optional[str] = None
    home_page_size: int = HOME_PAGE_SIZE
    paths_page_size: int = PATHS_PAGE_SIZE

    def client(self) -> PrismicClient:
        """Prismic client for these settings."""
        if not self.api_endpoint:
            raise ConfigError(
                "PRISMIC_API_ENDPOINT not set. Set it in the environment, ~/.env or blog.yaml"
            )
        return PrismicClient(self.api_endpoint, access_token=self.access_token)


def read_env_file(path: Path) -> dict[str, str]:
    """Parse KEY=value lines, ignoring comments and unknown keys."""
    values = {}
    with open(path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, _, value = line.partition("=")
            key = key.strip()
            if key.startswith("export "):
                key = key[len("export "):].strip()
            if key in KEYS:
                values[key] = value.strip().strip('"\'')
    return values


def read_yaml_file(path: Path) -> dict[str, str]:
    """Settings from blog.yaml; keys may be given in lower case."""
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping")

    values = {}
    for key, value in data.items():
        key = str(key).upper()
        if key in KEYS and value is not None:
            values[key] = str(value)
    return values


def _int_setting(values: dict, key: str, default: int) -> int:
    raw = values.get(key)
    if raw in (None, ""):
        return default
    try:
        number = int(raw)
    except ValueError:
        raise ConfigError(f"{key} must be an integer, got {raw!r}")
    if number < 1:
        raise ConfigError(f"{key} must be at least 1, got {number}")
    return number


def load_config(
    path: Optional[Path] = None,
    env_files: Optional[list[Path]] = None,
    environ: Optional[dict] = None,
) -> BlogConfig:
    """
    Resolve settings from all sources.

    Args:
        path: YAML config file (default: ./blog.yaml, skipped if missing)
        env_files: .env files to read (default: ENV_FILES)
        environ: Environment mapping (default: os.environ)

    Returns:
        BlogConfig
    """
    values: dict[str, str] = {}

    config_path = Path(path) if path else CONFIG_FILE
    if config_path.exists():
        values.update(read_yaml_file(config_path))
    elif path:
        raise ConfigError(f"Config file not found: {config_path}")

    for env_file in ENV_FILES if env_files is None else env_files:
        if env_file.exists():
            values.update(read_env_file(env_file))

    environ = os.environ if environ is None else environ
    for key in KEYS:
        if environ.get(key):
            values[key] = environ[key]

    return BlogConfig(
        api_endpoint=values.get("PRISMIC_API_ENDPOINT") or None,
        access_token=values.get("PRISMIC_ACCESS_TOKEN") or None,
        home_page_size=_int_setting(values, "BLOG_HOME_PAGE_SIZE", HOME_PAGE_SIZE),
        paths_page_size=_int_setting(values, "BLOG_PATHS_PAGE_SIZE", PATHS_PAGE_SIZE),
    )
