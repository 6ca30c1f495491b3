"""
Configuration management for show-sync.

This module handles loading, validating, and providing access to the
application configuration. Settings are read from an optional config.yaml
in the current working directory; CMS credentials may instead come from
the environment (a .env file is honoured).

The configuration contains:
    - Source catalog base URL
    - CMS base URL, credentials, language and content type settings
    - Worker count, page range and retry policy for the sync run
    - Directory for log files

Example config.yaml:
    catalog:
      base_url: "https://api.tvmaze.com/shows"

    cms:
      base_url: "https://api.rainbowsrock.net/"
      project_alias: "my-project"      # or UMB_PROJECT_ALIAS
      api_key: "secret"                # or API_KEY
      language: "en-US"
      page_size: 250

    sync:
      workers: 4
      last_page: null                  # null: until the catalog ends
      retry_attempts: 8

    output:
      log_directory: "./logs"
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from show_sync.core.exceptions import ConfigError


# Default configuration file name (looked up in current working directory)
CONFIG_FILENAME = "config.yaml"

# Environment variables holding the CMS credentials
ENV_PROJECT_ALIAS = "UMB_PROJECT_ALIAS"
ENV_API_KEY = "API_KEY"

DEFAULT_CATALOG_URL = "https://api.tvmaze.com/shows"
DEFAULT_CMS_URL = "https://api.rainbowsrock.net/"
DEFAULT_LANGUAGE = "en-US"
DEFAULT_PAGE_SIZE = 250
DEFAULT_CONTENT_TYPE_ALIAS = "tVShow"


@dataclass(frozen=True)
class CatalogConfig:
    """
    Source catalog settings.

    Attributes:
        base_url: Listing endpoint; pages are requested as {base_url}?page=N.
    """
    base_url: str


@dataclass(frozen=True)
class CmsConfig:
    """
    Destination CMS settings.

    Attributes:
        base_url: API root, always ending with '/'. Endpoints such as
                  'content' and 'media' are appended to it.
        project_alias: Sent as the 'umb-project-alias' header.
        api_key: Sent as the 'Api-Key' header.
        language: Culture key for localized properties (name, showSummary).
        page_size: Items per page when reading the root's children.
        content_type_alias: Document type of created show nodes.
        genre_element_type_key: Element type key of a genre block. Empty
                                when not configured; genres are then
                                not written.
    """
    base_url: str
    project_alias: str
    api_key: str
    language: str = DEFAULT_LANGUAGE
    page_size: int = DEFAULT_PAGE_SIZE
    content_type_alias: str = DEFAULT_CONTENT_TYPE_ALIAS
    genre_element_type_key: str = ""

    @property
    def auth_headers(self) -> dict[str, str]:
        """Static authentication headers carried by every CMS request."""
        return {
            "umb-project-alias": self.project_alias,
            "Api-Key": self.api_key,
        }


@dataclass(frozen=True)
class SyncConfig:
    """
    Sync run behavior.

    Attributes:
        workers: Number of parallel page workers. Keep it low enough to
                 stay under the CMS rate limit. Default: 4.
        first_page: First catalog page index (0-indexed). Default: 0.
        last_page: Last catalog page index (inclusive), or None to page
                   until the catalog reports end of data.
        retry_attempts: Attempts per upload/write operation. Default: 8.
        retry_initial_delay: First backoff delay in seconds. Default: 0.2.
        retry_max_delay: Backoff delay cap in seconds. Default: 10.
        request_timeout: Timeout of each HTTP call in seconds. Default: 10.
    """
    workers: int = 4
    first_page: int = 0
    last_page: int | None = None
    retry_attempts: int = 8
    retry_initial_delay: float = 0.2
    retry_max_delay: float = 10.0
    request_timeout: float = 10.0


@dataclass(frozen=True)
class OutputConfig:
    """
    Output settings.

    Attributes:
        log_directory: Directory where log files are written.
    """
    log_directory: Path


@dataclass(frozen=True)
class Config:
    """
    Complete application configuration.

    Created once by load_config() at startup and passed explicitly to
    every component that needs it.
    """
    catalog: CatalogConfig
    cms: CmsConfig
    sync: SyncConfig
    output: OutputConfig


def load_config(
    config_path: Path | None = None,
    environ: dict[str, str] | None = None
) -> Config:
    """
    Load and validate configuration from config.yaml and the environment.

    Args:
        config_path: Optional explicit path to config file. An explicit
                     path must exist. If None, CWD/config.yaml is used
                     when present, otherwise defaults apply.
        environ: Environment mapping used for credentials. Defaults to
                 os.environ after loading a .env file.

    Returns:
        Config: A frozen dataclass containing all configuration values.

    Raises:
        ConfigError: If the file is unreadable, has invalid YAML syntax,
                     contains invalid values, or credentials are missing.
    """
    if environ is None:
        load_dotenv()
        environ = dict(os.environ)

    raw_config: dict[str, Any] = {}
    if config_path is not None:
        if not config_path.exists():
            raise ConfigError(
                f"Configuration file not found: {config_path}",
                details={"file_path": str(config_path)}
            )
        raw_config = _read_yaml(config_path)
    else:
        default_path = Path.cwd() / CONFIG_FILENAME
        if default_path.exists():
            raw_config = _read_yaml(default_path)

    return Config(
        catalog=_parse_catalog_config(_section(raw_config, "catalog")),
        cms=_parse_cms_config(_section(raw_config, "cms"), environ),
        sync=_parse_sync_config(_section(raw_config, "sync")),
        output=_parse_output_config(_section(raw_config, "output")),
    )


def _read_yaml(config_path: Path) -> dict[str, Any]:
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            content = f.read()
    except IOError as e:
        raise ConfigError(
            f"Failed to read configuration file: {e}",
            details={"file_path": str(config_path), "original_error": str(e)}
        ) from e

    try:
        raw_config = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Invalid YAML syntax in configuration file: {e}",
            details={"file_path": str(config_path), "original_error": str(e)}
        ) from e

    # An empty file parses to None
    if raw_config is None:
        return {}

    if not isinstance(raw_config, dict):
        raise ConfigError(
            "Configuration file must contain a YAML dictionary",
            details={"file_path": str(config_path)}
        )
    return raw_config


def _section(raw_config: dict[str, Any], name: str) -> dict[str, Any]:
    """Return a config section, or {} when absent."""
    section = raw_config.get(name)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigError(
            f"Section '{name}' must be a dictionary",
            details={"section": name}
        )
    return section


def _string(section: dict[str, Any], field: str, default: str, prefix: str) -> str:
    value = section.get(field, default)
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(
            f"'{prefix}.{field}' must be a non-empty string",
            details={"field": f"{prefix}.{field}"}
        )
    return value.strip()


def _number(
    section: dict[str, Any],
    field: str,
    default: float,
    prefix: str,
    minimum: float,
    integer: bool = False
) -> Any:
    value = section.get(field, default)
    # bool is a subclass of int and is never a valid number here
    valid_types = (int,) if integer else (int, float)
    if isinstance(value, bool) or not isinstance(value, valid_types) or value < minimum:
        kind = "an integer" if integer else "a number"
        raise ConfigError(
            f"'{prefix}.{field}' must be {kind} >= {minimum}",
            details={"field": f"{prefix}.{field}", "value": value}
        )
    return value


def _parse_catalog_config(section: dict[str, Any]) -> CatalogConfig:
    return CatalogConfig(
        base_url=_string(section, "base_url", DEFAULT_CATALOG_URL, "catalog")
    )


def _parse_cms_config(section: dict[str, Any], environ: dict[str, str]) -> CmsConfig:
    """
    Parse the CMS section, falling back to the environment for credentials.

    Raises:
        ConfigError: If project alias or API key is missing in both places.
    """
    base_url = _string(section, "base_url", DEFAULT_CMS_URL, "cms")
    if not base_url.endswith("/"):
        base_url += "/"

    project_alias = section.get("project_alias") or environ.get(ENV_PROJECT_ALIAS, "")
    api_key = section.get("api_key") or environ.get(ENV_API_KEY, "")

    if not isinstance(project_alias, str) or not project_alias.strip():
        raise ConfigError(
            f"CMS project alias missing: set 'cms.project_alias' or {ENV_PROJECT_ALIAS}",
            details={"field": "cms.project_alias"}
        )
    if not isinstance(api_key, str) or not api_key.strip():
        raise ConfigError(
            f"CMS API key missing: set 'cms.api_key' or {ENV_API_KEY}",
            details={"field": "cms.api_key"}
        )

    return CmsConfig(
        base_url=base_url,
        project_alias=project_alias.strip(),
        api_key=api_key.strip(),
        language=_string(section, "language", DEFAULT_LANGUAGE, "cms"),
        page_size=_number(section, "page_size", DEFAULT_PAGE_SIZE, "cms", 1, integer=True),
        content_type_alias=_string(
            section, "content_type_alias", DEFAULT_CONTENT_TYPE_ALIAS, "cms"
        ),
        genre_element_type_key=_genre_element_type_key(section),
    )


def _genre_element_type_key(section: dict[str, Any]) -> str:
    """Element type key of genre blocks; "" disables writing genres."""
    if section.get("genre_element_type_key") is None:
        return ""
    return _string(section, "genre_element_type_key", "", "cms")


def _parse_sync_config(section: dict[str, Any]) -> SyncConfig:
    """
    Parse the sync section, applying defaults for missing fields.

    Raises:
        ConfigError: If a value is out of range or last_page < first_page.
    """
    defaults = SyncConfig()

    first_page = _number(section, "first_page", defaults.first_page, "sync", 0, integer=True)
    last_page = section.get("last_page")
    if last_page is not None:
        last_page = _number(section, "last_page", 0, "sync", first_page, integer=True)

    initial_delay = _number(
        section, "retry_initial_delay", defaults.retry_initial_delay, "sync", 0
    )
    max_delay = _number(section, "retry_max_delay", defaults.retry_max_delay, "sync", initial_delay)

    return SyncConfig(
        workers=_number(section, "workers", defaults.workers, "sync", 1, integer=True),
        first_page=first_page,
        last_page=last_page,
        retry_attempts=_number(
            section, "retry_attempts", defaults.retry_attempts, "sync", 1, integer=True
        ),
        retry_initial_delay=float(initial_delay),
        retry_max_delay=float(max_delay),
        request_timeout=float(
            _number(section, "request_timeout", defaults.request_timeout, "sync", 0.1)
        ),
    )


def _parse_output_config(section: dict[str, Any]) -> OutputConfig:
    directory = _string(section, "log_directory", "logs", "output")
    return OutputConfig(log_directory=Path(directory).expanduser().resolve())
