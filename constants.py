from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ScanDefaults:
    INTERFACE: str = "usb0"
    PORT_FIRST: int = 5900
    PORT_LAST: int = 5905
    TIMEOUT: float = 30.0

    @property
    def port_range(self) -> str:
        return f"{self.PORT_FIRST}-{self.PORT_LAST}"


@dataclass(frozen=True)
class HistoryDefaults:
    LIMIT: int = 5
    FILENAME: str = "history"


@dataclass(frozen=True)
class TimeoutDefaults:
    RENDERER: float = 0.0
    CONNECT_SCREEN: int = 2
    FLASH_GRACE: float = 5.0


@dataclass(frozen=True)
class SceneLayout:
    FONT_SIZE: int = 32
    CANVAS_WIDTH: int = 1404
    MARGIN_X: int = 60
    TOP: int = 80
    ROW_HEIGHT: int = 70
    ROW_GAP: int = 14
    SECTION_GAP: int = 40
    TOGGLE_WIDTH: int = 400

    @property
    def content_width(self) -> int:
        return self.CANVAS_WIDTH - 2 * self.MARGIN_X


@dataclass(frozen=True)
class Collaborators:
    RENDERER: str = "simple"
    VIEWER: str = "vnsee"
    SCANNER: str = "nmap"


SCAN = ScanDefaults()
HISTORY = HistoryDefaults()
TIMEOUTS = TimeoutDefaults()
LAYOUT = SceneLayout()
COLLABORATORS = Collaborators()

APP_NAME = "vnc-launcher"
VIEWER_LOG_NAME = "viewer.log"
LAUNCHER_LOG_NAME = "launcher.log"
