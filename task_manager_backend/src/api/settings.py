from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List, Optional

from .models import SortOption
from .sync_status import AccountStatus


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - ENABLE_BASIC_AUTH: 'true' to enable optional HTTP Basic Auth (default: false)
    - BASIC_AUTH_USERNAME: username for basic auth (required when ENABLE_BASIC_AUTH=true)
    - BASIC_AUTH_PASSWORD: password for basic auth (required when ENABLE_BASIC_AUTH=true)
    - DEFAULT_SORT: sort applied to sections when none is requested (default: due_date)
    - DEFAULT_SHOW_COMPLETED: whether sections include completed tasks by default (default: true)
    - SYNC_ACCOUNT_STATUS: account status reported by the static provider
      (default: could_not_determine)
    - SYNC_CHECK_ON_STARTUP: run one sync status check when the app starts (default: true)
    - LOG_LEVEL: console log level (default: INFO)
    - LOG_FILE: optional path of a DEBUG-level log file
    """

    cors_allow_origins: List[str]
    enable_basic_auth: bool
    basic_auth_username: Optional[str]
    basic_auth_password: Optional[str]
    default_sort: SortOption
    default_show_completed: bool
    sync_account_status: str
    sync_check_on_startup: bool
    log_level: str
    log_file: Optional[str]


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_bool(value: str, default: bool = False) -> bool:
    v = value.strip().lower()
    if v in {"1", "true", "yes", "on"}:
        return True
    if v in {"0", "false", "no", "off"}:
        return False
    return default


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    cors_raw = _get_env("CORS_ALLOW_ORIGINS", "*")
    origins = _parse_origins(cors_raw)

    enable_basic_auth = _parse_bool(_get_env("ENABLE_BASIC_AUTH", "false"), False)
    basic_user = os.getenv("BASIC_AUTH_USERNAME") if enable_basic_auth else None
    basic_pass = os.getenv("BASIC_AUTH_PASSWORD") if enable_basic_auth else None

    # Unknown values fall back to due_date
    default_sort = SortOption.coerce(_get_env("DEFAULT_SORT", SortOption.DUE_DATE.value))
    show_completed = _parse_bool(_get_env("DEFAULT_SHOW_COMPLETED", "true"), True)

    # Unknown values are kept so the monitor can report them as unavailable
    account_status = _get_env("SYNC_ACCOUNT_STATUS", AccountStatus.COULD_NOT_DETERMINE.value).strip().lower()
    check_on_startup = _parse_bool(_get_env("SYNC_CHECK_ON_STARTUP", "true"), True)

    log_level = _get_env("LOG_LEVEL", "INFO").strip().upper()
    log_file = os.getenv("LOG_FILE") or None

    return Settings(
        cors_allow_origins=origins,
        enable_basic_auth=enable_basic_auth,
        basic_auth_username=basic_user,
        basic_auth_password=basic_pass,
        default_sort=default_sort,
        default_show_completed=show_completed,
        sync_account_status=account_status,
        sync_check_on_startup=check_on_startup,
        log_level=log_level,
        log_file=log_file,
    )
