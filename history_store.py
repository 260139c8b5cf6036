"""Most-recently-used list of servers, kept in a small text file."""
from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import List, Optional

from constants import HISTORY
from models import Endpoint, HistoryRecord, parse_port

logger = logging.getLogger(__name__)

SEPARATOR = "\t"


def format_entry(endpoint: Endpoint) -> Optional[str]:
    host, port = endpoint.host, str(endpoint.port)
    if any(ch in host for ch in "\t\r\n") or any(ch in port for ch in "\r\n"):
        return None
    return f"{host}{SEPARATOR}{port}"


def parse_entry(line: str) -> Optional[Endpoint]:
    if SEPARATOR in line:
        host, port = line.split(SEPARATOR, 1)
        return Endpoint(host, parse_port(port))
    # Older files used a single space between host and port.
    parts = line.split()
    if len(parts) != 2:
        return None
    return Endpoint(parts[0], parse_port(parts[1]))


class HistoryStore:
    """Reads and writes ``host<TAB>port`` lines, most recent first."""

    def __init__(self, path: Path, *, limit: int = HISTORY.LIMIT) -> None:
        self.path = Path(path)
        self.limit = limit

    def load(self) -> HistoryRecord:
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return ()
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Ignoring unreadable history file %s: %s", self.path, exc)
            return ()
        entries: List[Endpoint] = []
        for line in text.split("\n"):
            if not line:
                continue
            endpoint = parse_entry(line)
            if endpoint is None:
                logger.debug("Skipping malformed history line %r", line)
                continue
            if endpoint not in entries:
                entries.append(endpoint)
        return tuple(entries[: self.limit])

    def promote(self, record: HistoryRecord, endpoint: Endpoint) -> HistoryRecord:
        rest = tuple(item for item in record if item != endpoint)
        return ((endpoint,) + rest)[: self.limit]

    def persist(self, record: HistoryRecord) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        lines: List[str] = []
        for item in record[: self.limit]:
            line = format_entry(item)
            if line is None:
                logger.warning("Not saving %r to history: it cannot be stored on one line", item)
                continue
            lines.append(line)
        payload = "".join(f"{line}\n" for line in lines)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as fh:
                fh.write(payload)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, self.path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise
        logger.info("Saved %d history entr%s to %s", len(lines), "y" if len(lines) == 1 else "ies", self.path)
