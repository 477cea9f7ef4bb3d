# src/wosync/core/config.py
"""
Configuration schema and loading for the work-order sync engine.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction and passed by
reference into each component's constructor; business logic never
reads the environment directly.
"""

import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

from wosync.contracts.enums import MirrorSyncMethod
from wosync.contracts.workorder import DEFAULT_SERVER_OWNED_FIELDS, FIELD_ID


class UpstreamSettings(BaseModel):
    """Connection to the authoritative work-order service.

    Example YAML:
        upstream:
          base_url: https://acme.0.razorsync.com/ApiService.svc
          token: ${RAZORSYNC_TOKEN}
          server_name: acme
    """

    model_config = {"frozen": True}

    base_url: str = Field(description="Service root; /WorkOrder is appended")
    token: str = Field(min_length=1, description="Static access credential sent in the Token header")
    server_name: str | None = Field(default=None, description="Value of the ServerName header")
    timeout_seconds: float = Field(default=30.0, gt=0, description="Per-call timeout")
    server_owned_fields: tuple[str, ...] = Field(
        default=DEFAULT_SERVER_OWNED_FIELDS,
        description="Fields stripped from every write envelope (regenerated upstream)",
    )
    stamp_modified_date: bool = Field(
        default=False,
        description="Write fresh /Date(ms)/ values to LastChangeDate/ModifiedDate instead of omitting them",
    )

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("base_url must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("server_owned_fields")
    @classmethod
    def validate_server_owned_fields(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        if FIELD_ID in v:
            raise ValueError(f"{FIELD_ID} identifies the record and cannot be server-owned")
        return v


class MirrorSettings(BaseModel):
    """Local mirror database holding the field-worker roster."""

    model_config = {"frozen": True}

    # NOTE: str, not Path - Path mangles PostgreSQL DSNs
    url: str = Field(description="Full SQLAlchemy database URL")


class MirrorSyncSettings(BaseModel):
    """Reconciliation pipeline notification endpoint."""

    model_config = {"frozen": True}

    url: str | None = Field(default=None, description="Webhook URL; None disables the trigger")
    method: MirrorSyncMethod = Field(default=MirrorSyncMethod.GET)
    timeout_seconds: float = Field(default=10.0, gt=0)


class ReassignmentSettings(BaseModel):
    """Field-worker fallback used when the current assignee is not active."""

    model_config = {"frozen": True}

    fallback_field_worker_id: int = Field(gt=0, description="Catch-all active field worker")


class BatchSettings(BaseModel):
    """Sequential batch throttle."""

    model_config = {"frozen": True}

    delay_seconds: float = Field(default=1.0, ge=0, description="Pause between consecutive items")


class WorkOrderSyncSettings(BaseModel):
    """Top-level configuration, constructed once at process start."""

    model_config = {"frozen": True}

    upstream: UpstreamSettings
    mirror: MirrorSettings
    reassignment: ReassignmentSettings
    mirror_sync: MirrorSyncSettings = Field(default_factory=MirrorSyncSettings)
    batch: BatchSettings = Field(default_factory=BatchSettings)


# Regex pattern for ${VAR} or ${VAR:-default} syntax
_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")


def _expand_env_vars(config: dict[str, Any]) -> dict[str, Any]:
    """Recursively expand ${VAR} and ${VAR:-default} patterns in config values.

    Args:
        config: Configuration dict (may contain nested structures)

    Returns:
        New dict with environment variables expanded
    """
    import os

    def _expand_string(value: str) -> str:
        def replacer(match: re.Match[str]) -> str:
            var_name = match.group(1)
            default = match.group(2)  # None if no default specified
            env_value = os.environ.get(var_name)
            if env_value is not None:
                return env_value
            if default is not None:
                return default
            # No env var and no default - keep original (will likely cause error)
            return match.group(0)

        return _ENV_VAR_PATTERN.sub(replacer, value)

    def _expand_value(value: Any) -> Any:
        if isinstance(value, str):
            return _expand_string(value)
        elif isinstance(value, dict):
            return {k: _expand_value(v) for k, v in value.items()}
        elif isinstance(value, list):
            return [_expand_value(item) for item in value]
        else:
            return value

    return {k: _expand_value(v) for k, v in config.items()}


def _lower_keys(value: Any) -> Any:
    """Lowercase mapping keys at every depth.

    Dynaconf uppercases top-level keys and keeps env-var nested keys as
    typed (WOSYNC_UPSTREAM__TOKEN arrives as "TOKEN").
    """
    if isinstance(value, dict):
        return {str(k).lower(): _lower_keys(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_lower_keys(item) for item in value]
    return value


def load_settings(config_path: Path) -> WorkOrderSyncSettings:
    """Load settings from YAML file with environment variable overrides.

    Uses Dynaconf for multi-source loading with precedence:
    1. Environment variables (WOSYNC_*) - highest priority
    2. Config file (wosync.yaml)
    3. Defaults from Pydantic schema - lowest priority

    Environment variable format: WOSYNC_UPSTREAM__TOKEN for nested keys.

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config file doesn't exist
    """
    from dynaconf import Dynaconf

    # Explicit check for file existence (Dynaconf silently accepts missing files)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="WOSYNC",
        settings_files=[str(config_path)],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = _lower_keys({k: v for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys})
    raw_config = _expand_env_vars(raw_config)

    return WorkOrderSyncSettings(**raw_config)


_REDACTED = "***"


def resolve_config(settings: WorkOrderSyncSettings) -> dict[str, Any]:
    """Convert validated settings to a JSON-safe dict for display.

    The upstream token is redacted, and so is the password component of
    the mirror database URL.
    """
    from sqlalchemy.engine.url import make_url
    from sqlalchemy.exc import ArgumentError

    config_dict = settings.model_dump(mode="json")
    config_dict["upstream"]["token"] = _REDACTED

    try:
        url = make_url(settings.mirror.url)
    except ArgumentError:
        config_dict["mirror"]["url"] = _REDACTED
    else:
        if url.password is not None:
            config_dict["mirror"]["url"] = url.render_as_string(hide_password=True)
    return config_dict
