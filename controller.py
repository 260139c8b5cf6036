"""Server selection form: renders the candidates and applies renderer events."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, replace
from typing import Optional, Protocol, Tuple

from constants import LAYOUT
from errors import InvariantError, ProtocolError
from models import HISTORY_SOURCE, INPUT_KINDS, USB_SOURCE, CandidateList, Endpoint, InputModeFlags
from renderer import InputEvent, Selected, TextChanged
from scene import SceneBuilder, SceneDocument

logger = logging.getLogger(__name__)

MANUAL_HOST_FIELD = "manualhost"
MANUAL_PORT_FIELD = "manualport"
MANUAL_CONNECT = "manualsrv"
QUIT = "quit"
TOGGLE_PREFIX = "toggle"
WIDGET_PREFIXES = {USB_SOURCE: "usbsrv", HISTORY_SOURCE: "histsrv"}

CANDIDATE_RE = re.compile(r"^(?P<prefix>usbsrv|histsrv)-(?P<index>\d+)$")

STRINGS = {
    "title": "Connect to a VNC server",
    USB_SOURCE: "Found over USB",
    HISTORY_SOURCE: "Recent servers",
    "none_found": "(none)",
    "manual": "Other server",
    "host": "Host",
    "port": "Port",
    "connect": "Connect",
    "inputs": "Forward input",
    "quit": "Quit",
}


class Presenter(Protocol):
    def present(self, document: SceneDocument) -> InputEvent: ...


@dataclass(frozen=True)
class FormState:
    usb_candidates: CandidateList = field(default_factory=lambda: CandidateList(USB_SOURCE))
    history_candidates: CandidateList = field(default_factory=lambda: CandidateList(HISTORY_SOURCE))
    manual_host: str = ""
    manual_port: str = ""
    input_modes: InputModeFlags = field(default_factory=InputModeFlags)


@dataclass(frozen=True)
class SessionChoice:
    endpoint: Endpoint
    input_modes: InputModeFlags


def render_form(state: FormState, builder: Optional[SceneBuilder] = None) -> SceneDocument:
    builder = (builder or SceneBuilder()).reset()
    builder.set_attribute("justify", "left")
    x = LAYOUT.MARGIN_X
    width = LAYOUT.content_width
    row = LAYOUT.ROW_HEIGHT
    y = LAYOUT.TOP

    builder.add_widget("label", x, y, width, row, STRINGS["title"])
    y += row + LAYOUT.SECTION_GAP

    for candidates in (state.usb_candidates, state.history_candidates):
        builder.add_widget("label", x, y, width, row, STRINGS[candidates.source])
        y += row + LAYOUT.ROW_GAP
        if not len(candidates):
            builder.add_widget("label", x, y, width, row, STRINGS["none_found"])
            y += row + LAYOUT.ROW_GAP
        prefix = WIDGET_PREFIXES[candidates.source]
        for index, endpoint in enumerate(candidates):
            builder.add_widget("button", x, y, width, row, str(endpoint), f"{prefix}-{index}")
            y += row + LAYOUT.ROW_GAP
        y += LAYOUT.SECTION_GAP

    builder.add_widget("label", x, y, width, row, STRINGS["manual"])
    y += row + LAYOUT.ROW_GAP
    half = (width - LAYOUT.ROW_GAP) // 2
    builder.add_widget("label", x, y, half, row, STRINGS["host"])
    builder.add_widget("textinput", x + half + LAYOUT.ROW_GAP, y, half, row, state.manual_host, MANUAL_HOST_FIELD)
    y += row + LAYOUT.ROW_GAP
    builder.add_widget("label", x, y, half, row, STRINGS["port"])
    builder.add_widget("textinput", x + half + LAYOUT.ROW_GAP, y, half, row, state.manual_port, MANUAL_PORT_FIELD)
    y += row + LAYOUT.ROW_GAP
    builder.add_widget("button", x, y, width, row, STRINGS["connect"], MANUAL_CONNECT)
    y += row + LAYOUT.SECTION_GAP

    builder.add_widget("label", x, y, width, row, STRINGS["inputs"])
    y += row + LAYOUT.ROW_GAP
    for offset, kind in enumerate(INPUT_KINDS):
        mark = "[x]" if getattr(state.input_modes, kind) else "[ ]"
        toggle_x = x + offset * (LAYOUT.TOGGLE_WIDTH + LAYOUT.ROW_GAP)
        builder.add_widget(
            "button", toggle_x, y, LAYOUT.TOGGLE_WIDTH, row, f"{mark} {kind.capitalize()}", f"{TOGGLE_PREFIX}{kind}"
        )
    y += row + LAYOUT.SECTION_GAP

    builder.add_widget("button", x, y, width, row, STRINGS["quit"], QUIT)
    return builder.build()


def _candidate(candidates: CandidateList, index: int) -> Endpoint:
    try:
        return candidates[index]
    except IndexError as exc:
        raise InvariantError(
            f"{candidates.source} entry {index} selected but only {len(candidates)} were rendered"
        ) from exc


def apply_event(state: FormState, event: InputEvent) -> Tuple[FormState, Optional[SessionChoice], bool]:
    """Return ``(new_state, choice, done)`` for one renderer event.

    ``done`` with no choice means the user asked to quit.
    """
    if isinstance(event, TextChanged):
        if event.field_id == MANUAL_HOST_FIELD:
            return replace(state, manual_host=event.value), None, False
        if event.field_id == MANUAL_PORT_FIELD:
            return replace(state, manual_port=event.value), None, False
        raise ProtocolError(f"input: {event.field_id} : {event.value}")

    if isinstance(event, Selected):
        widget = event.widget_id
        match = CANDIDATE_RE.match(widget)
        if match:
            index = int(match.group("index"))
            source = state.usb_candidates if match.group("prefix") == "usbsrv" else state.history_candidates
            return state, SessionChoice(_candidate(source, index), state.input_modes), True
        if widget == MANUAL_CONNECT:
            endpoint = Endpoint.from_strings(state.manual_host, state.manual_port)
            return state, SessionChoice(endpoint, state.input_modes), True
        if widget.startswith(TOGGLE_PREFIX) and widget[len(TOGGLE_PREFIX):] in INPUT_KINDS:
            kind = widget[len(TOGGLE_PREFIX):]
            return replace(state, input_modes=state.input_modes.toggle(kind)), None, False
        if widget == QUIT:
            return state, None, True
        raise ProtocolError(f"selected: {widget}")

    raise ProtocolError(repr(event))


class ConfigurationController:
    def __init__(self, presenter: Presenter, state: FormState) -> None:
        self.presenter = presenter
        self.state = state

    def run(self) -> Optional[SessionChoice]:
        """Loop until the user picks a server (returned) or quits (``None``)."""
        while True:
            event = self.presenter.present(render_form(self.state))
            self.state, choice, done = apply_event(self.state, event)
            if done:
                if choice is None:
                    logger.info("User quit from the configuration screen")
                else:
                    logger.info("Selected %s", choice.endpoint)
                return choice
