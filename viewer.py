from __future__ import annotations

import logging
import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence, Tuple

from models import Endpoint, InputModeFlags
from process_utils import managed_process

logger = logging.getLogger(__name__)

SPAWN_FAILED = 127


@dataclass(frozen=True)
class ViewerResult:
    exit_code: int
    log_lines: Tuple[str, ...] = ()

    @property
    def failed(self) -> bool:
        return self.exit_code != 0


def shell_join(parts: Sequence[str]) -> str:
    return " ".join(shlex.quote(str(x)) for x in parts)


class ViewerLauncher:
    def __init__(self, command: Sequence[str], log_path: Path) -> None:
        self.command: List[str] = list(command)
        self.log_path = Path(log_path)

    def build_command(self, endpoint: Endpoint, input_modes: InputModeFlags) -> List[str]:
        return self.command + [endpoint.host, str(endpoint.port)] + input_modes.viewer_flags()

    def run(self, endpoint: Endpoint, input_modes: InputModeFlags) -> ViewerResult:
        cmd = self.build_command(endpoint, input_modes)
        logger.info("Launching viewer: %s", shell_join(cmd))
        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            with self.log_path.open("w", encoding="utf-8") as log_fh:
                with managed_process(cmd, stderr=log_fh) as proc:
                    exit_code = proc.wait()
        except OSError as exc:
            logger.error("Could not start viewer: %s", exc)
            return ViewerResult(SPAWN_FAILED, (str(exc),))
        lines = self.read_log()
        if exit_code != 0:
            logger.warning("Viewer exited with code %s", exit_code)
        else:
            logger.info("Viewer exited")
        return ViewerResult(exit_code, lines)

    def read_log(self) -> Tuple[str, ...]:
        try:
            text = self.log_path.read_text(encoding="utf-8", errors="replace")
        except OSError:
            return ()
        return tuple(line for line in text.splitlines() if line.strip())
