"""One-shot round trips with the external UI renderer."""
from __future__ import annotations

import logging
import re
import subprocess
import threading
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

from constants import TIMEOUTS
from errors import CollaboratorMissingError, ProtocolError, RendererBusyError, RendererTimeoutError
from process_utils import managed_process
from scene import SceneDocument

logger = logging.getLogger(__name__)

INPUT_RE = re.compile(r"^input: (?P<field>[^:]*?)\s*:\s?(?P<value>.*)$")
SELECTED_PREFIX = "selected: "
ENCODING = "utf-8"


@dataclass(frozen=True)
class TextChanged:
    field_id: str
    value: str


@dataclass(frozen=True)
class Selected:
    widget_id: str


InputEvent = Union[TextChanged, Selected]


def parse_event(line: str) -> InputEvent:
    text = line.rstrip("\r\n")
    match = INPUT_RE.match(text)
    if match:
        field_id = match.group("field").strip()
        if not field_id:
            raise ProtocolError(line)
        return TextChanged(field_id, match.group("value"))
    if text.startswith(SELECTED_PREFIX):
        widget_id = text[len(SELECTED_PREFIX):].strip()
        if not widget_id:
            raise ProtocolError(line)
        return Selected(widget_id)
    raise ProtocolError(line)


class RendererSession:
    """Drives the renderer one scene at a time.

    Each call spawns the renderer, feeds it a scene on stdin and reads back a
    single event line. The renderer is a shared resource, so a session never
    has more than one scene in flight.
    """

    def __init__(self, command: Sequence[str], *, timeout: Optional[float] = None) -> None:
        self.command: List[str] = list(command)
        self.timeout = timeout or None
        self._busy = False

    def present(self, document: SceneDocument) -> InputEvent:
        line = self._exclusive(self._round_trip, document)
        logger.debug("Renderer replied %r", line)
        return parse_event(line)

    def flash(self, document: SceneDocument, *, seconds: float) -> None:
        """Show a scene that dismisses itself; output is ignored."""
        self._exclusive(self._show, document, seconds + TIMEOUTS.FLASH_GRACE)

    def _exclusive(self, func, *args):
        if self._busy:
            raise RendererBusyError("Another scene is still being presented")
        self._busy = True
        try:
            return func(*args)
        except FileNotFoundError as exc:
            raise CollaboratorMissingError("Renderer", self.command[0]) from exc
        finally:
            self._busy = False

    def _round_trip(self, document: SceneDocument) -> str:
        expired = threading.Event()
        with managed_process(
            self.command,
            terminate=True,
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
        ) as proc:
            timer = None
            if self.timeout:

                def expire() -> None:
                    expired.set()
                    proc.kill()

                timer = threading.Timer(self.timeout, expire)
                timer.daemon = True
                timer.start()
            try:
                try:
                    proc.stdin.write(document.serialize().encode(ENCODING))
                    proc.stdin.close()
                except BrokenPipeError:
                    logger.warning("Renderer closed its input before the scene was written")
                raw = proc.stdout.readline()
                proc.stdout.close()
            finally:
                if timer is not None:
                    timer.cancel()
        if expired.is_set():
            raise RendererTimeoutError(f"Renderer gave no answer within {self.timeout:g}s")
        try:
            return raw.decode(ENCODING)
        except UnicodeDecodeError as exc:
            raise ProtocolError(raw.decode(ENCODING, errors="replace")) from exc

    def _show(self, document: SceneDocument, wait: float) -> None:
        with managed_process(
            self.command,
            terminate=True,
            stdin=subprocess.PIPE,
            stdout=subprocess.DEVNULL,
        ) as proc:
            try:
                proc.communicate(document.serialize().encode(ENCODING), timeout=wait)
            except subprocess.TimeoutExpired:
                logger.debug("Transient scene still up after %.1fs, closing it", wait)
