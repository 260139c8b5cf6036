"""Top-level loop: choose a server, run the viewer, report failures, repeat."""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Iterable, Optional, Protocol

from constants import LAYOUT, TIMEOUTS
from controller import ConfigurationController, FormState, SessionChoice
from discovery import DiscoveryAdapter
from history_store import HistoryStore
from models import HISTORY_SOURCE, USB_SOURCE, CandidateList, Endpoint
from renderer import InputEvent, Selected
from scene import SceneBuilder, SceneDocument
from viewer import ViewerLauncher, ViewerResult

logger = logging.getLogger(__name__)

BACK = "back"


class Renderer(Protocol):
    def present(self, document: SceneDocument) -> InputEvent: ...

    def flash(self, document: SceneDocument, *, seconds: float) -> None: ...


def connecting_scene(endpoint: Endpoint, seconds: int) -> SceneDocument:
    builder = SceneBuilder()
    builder.set_attribute("timeout", seconds)
    builder.set_attribute("justify", "center")
    builder.add_widget("label", LAYOUT.MARGIN_X, LAYOUT.TOP * 8, LAYOUT.content_width, LAYOUT.ROW_HEIGHT,
                       f"Connecting to {endpoint}…")
    return builder.build()


def error_scene(endpoint: Endpoint, result: ViewerResult) -> SceneDocument:
    builder = SceneBuilder()
    builder.set_attribute("justify", "left")
    x, width, row = LAYOUT.MARGIN_X, LAYOUT.content_width, LAYOUT.ROW_HEIGHT
    y = LAYOUT.TOP
    builder.add_widget("label", x, y, width, row, f"Connection to {endpoint} failed (exit code {result.exit_code})")
    y += row + LAYOUT.SECTION_GAP
    for line in result.log_lines:
        builder.add_widget("label", x, y, width, row, line)
        y += row
    y += LAYOUT.SECTION_GAP
    builder.add_widget("button", x, y, LAYOUT.TOGGLE_WIDTH, row, "Back", BACK)
    return builder.build()


class SessionSupervisor:
    def __init__(
        self,
        renderer: Renderer,
        history: HistoryStore,
        discovery: DiscoveryAdapter,
        viewer: ViewerLauncher,
        *,
        connect_screen_seconds: int = TIMEOUTS.CONNECT_SCREEN,
        controller_factory: Callable[[Renderer, FormState], ConfigurationController] = ConfigurationController,
    ) -> None:
        self.renderer = renderer
        self.history = history
        self.discovery = discovery
        self.viewer = viewer
        self.connect_screen_seconds = connect_screen_seconds
        self.controller_factory = controller_factory
        self._last: Optional[FormState] = None

    def fresh_form(self, history: Iterable[Endpoint]) -> FormState:
        usb = CandidateList(USB_SOURCE, tuple(self.discovery.scan_local_link()))
        recent = CandidateList(HISTORY_SOURCE, tuple(history))
        if self._last is None:
            return FormState(usb_candidates=usb, history_candidates=recent)
        return replace(self._last, usb_candidates=usb, history_candidates=recent)

    def run(self) -> int:
        while True:
            record = self.history.load()
            controller = self.controller_factory(self.renderer, self.fresh_form(record))
            choice = controller.run()
            if choice is None:
                return 0
            self._last = controller.state
            self.history.persist(self.history.promote(record, choice.endpoint))
            result = self.launch(choice)
            if result.failed:
                self.report(choice.endpoint, result)

    def launch(self, choice: SessionChoice) -> ViewerResult:
        self.renderer.flash(connecting_scene(choice.endpoint, self.connect_screen_seconds),
                            seconds=self.connect_screen_seconds)
        return self.viewer.run(choice.endpoint, choice.input_modes)

    def report(self, endpoint: Endpoint, result: ViewerResult) -> None:
        document = error_scene(endpoint, result)
        while True:
            event = self.renderer.present(document)
            if event == Selected(BACK):
                return
            logger.debug("Ignoring %r on the error screen", event)
