"""Runtime settings, read from the environment and optional .env files."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Mapping, Optional

from dotenv import load_dotenv

from constants import (
    APP_NAME,
    COLLABORATORS,
    HISTORY,
    LAUNCHER_LOG_NAME,
    SCAN,
    TIMEOUTS,
    VIEWER_LOG_NAME,
)
from validators import split_command, validate_float, validate_int

SCRIPT_DIR = Path(__file__).resolve().parent
ENV_PREFIX = "VNC_LAUNCHER_"

logger = logging.getLogger(__name__)


def load_env_files(base_dir: Path = SCRIPT_DIR) -> None:
    load_dotenv(base_dir / ".env")
    load_dotenv(base_dir / ".env.local")


def default_cache_dir(environ: Mapping[str, str]) -> Path:
    xdg = environ.get("XDG_CACHE_HOME", "").strip()
    base = Path(xdg).expanduser() if xdg else Path.home() / ".cache"
    return base / APP_NAME


@dataclass(frozen=True)
class Settings:
    renderer_cmd: List[str]
    viewer_cmd: List[str]
    scanner_cmd: List[str]
    interface: str
    cache_dir: Path
    scan_timeout: float
    renderer_timeout: Optional[float]
    connect_screen_seconds: int
    log_level: str

    @property
    def history_path(self) -> Path:
        return self.cache_dir / HISTORY.FILENAME

    @property
    def viewer_log_path(self) -> Path:
        return self.cache_dir / VIEWER_LOG_NAME

    @property
    def launcher_log_path(self) -> Path:
        return self.cache_dir / LAUNCHER_LOG_NAME

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if environ is None else environ
        warnings: List[str] = []

        def get(key: str) -> str | None:
            return env.get(ENV_PREFIX + key)

        def command(key: str, default: str) -> List[str]:
            result = split_command(get(key), default=default, name=ENV_PREFIX + key)
            if not result.is_valid:
                warnings.append(result.error or "")
                return [default]
            return result.value or [default]

        scan_timeout = validate_float(
            get("SCAN_TIMEOUT"), default=SCAN.TIMEOUT, name=ENV_PREFIX + "SCAN_TIMEOUT", min_value=0.1
        )
        if not scan_timeout.is_valid:
            warnings.append(scan_timeout.error or "")
        renderer_timeout = validate_float(
            get("RENDERER_TIMEOUT"), default=TIMEOUTS.RENDERER, name=ENV_PREFIX + "RENDERER_TIMEOUT", min_value=0
        )
        if not renderer_timeout.is_valid:
            warnings.append(renderer_timeout.error or "")
        connect_seconds = validate_int(
            get("CONNECT_SCREEN_SECONDS"),
            default=TIMEOUTS.CONNECT_SCREEN,
            name=ENV_PREFIX + "CONNECT_SCREEN_SECONDS",
            min_value=1,
        )
        if not connect_seconds.is_valid:
            warnings.append(connect_seconds.error or "")

        cache_override = (get("CACHE_DIR") or "").strip()
        cache_dir = Path(cache_override).expanduser() if cache_override else default_cache_dir(env)

        for message in warnings:
            logger.warning("Ignoring invalid setting: %s", message)

        timeout_value = renderer_timeout.value if renderer_timeout.is_valid else TIMEOUTS.RENDERER
        return cls(
            renderer_cmd=command("RENDERER", COLLABORATORS.RENDERER),
            viewer_cmd=command("VIEWER", COLLABORATORS.VIEWER),
            scanner_cmd=command("SCANNER", COLLABORATORS.SCANNER),
            interface=(get("INTERFACE") or "").strip() or SCAN.INTERFACE,
            cache_dir=cache_dir,
            scan_timeout=scan_timeout.value if scan_timeout.is_valid else SCAN.TIMEOUT,
            renderer_timeout=timeout_value or None,
            connect_screen_seconds=connect_seconds.value if connect_seconds.is_valid else TIMEOUTS.CONNECT_SCREEN,
            log_level=((get("LOG_LEVEL") or "").strip() or "INFO").upper(),
        )
