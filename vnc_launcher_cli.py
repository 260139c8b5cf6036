#!/usr/bin/env python3
"""Pick a VNC server on the tablet screen and keep a viewer session running."""
from __future__ import annotations

import argparse
import logging
import shutil
import sys
from typing import List

from discovery import DiscoveryAdapter
from errors import AppError, CollaboratorMissingError, ErrorSeverity, LauncherError, handle_error
from history_store import HistoryStore
from renderer import RendererSession
from settings import Settings, load_env_files
from supervisor import SessionSupervisor
from viewer import ViewerLauncher

logger = logging.getLogger("vnc_launcher")


def configure_logging(settings: Settings) -> None:
    settings.cache_dir.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        filename=settings.launcher_log_path,
        level=getattr(logging, settings.log_level, logging.INFO),
        format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
    )


def check_collaborators(settings: Settings) -> List[str]:
    """Fail on a missing renderer or viewer; return warnings for optional tools."""
    for name, cmd in (("Renderer", settings.renderer_cmd), ("Viewer", settings.viewer_cmd)):
        if shutil.which(cmd[0]) is None:
            raise CollaboratorMissingError(name, cmd[0])
    warnings: List[str] = []
    if shutil.which(settings.scanner_cmd[0]) is None:
        warnings.append(f"'{settings.scanner_cmd[0]}' is not installed; USB server discovery is disabled.")
    return warnings


def build_supervisor(settings: Settings) -> SessionSupervisor:
    return SessionSupervisor(
        RendererSession(settings.renderer_cmd, timeout=settings.renderer_timeout),
        HistoryStore(settings.history_path),
        DiscoveryAdapter(settings.scanner_cmd, interface=settings.interface, timeout=settings.scan_timeout),
        ViewerLauncher(settings.viewer_cmd, settings.viewer_log_path),
        connect_screen_seconds=settings.connect_screen_seconds,
    )


def main(argv: List[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Choose a VNC server (discovered over USB, recently used, or typed in) and view it.",
        epilog="Settings are read from VNC_LAUNCHER_* environment variables or a .env file.",
    )
    parser.parse_args(argv)

    load_env_files()
    settings = Settings.from_env()
    configure_logging(settings)
    logger.info("Starting; cache directory %s", settings.cache_dir)

    try:
        for warning in check_collaborators(settings):
            handle_error(AppError(warning, ErrorSeverity.WARNING))
    except CollaboratorMissingError as exc:
        handle_error(AppError(str(exc), ErrorSeverity.FATAL))
        return 1

    try:
        return build_supervisor(settings).run()
    except KeyboardInterrupt:
        return 130
    except LauncherError as exc:
        logger.exception("Launcher stopped")
        handle_error(AppError(str(exc), ErrorSeverity.ERROR))
        return 1


if __name__ == "__main__":
    sys.exit(main())
