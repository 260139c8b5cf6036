from __future__ import annotations

from dataclasses import dataclass, replace
from typing import List, Tuple, Union

INPUT_KINDS = ("buttons", "pen", "touch")

USB_SOURCE = "usb-discovered"
HISTORY_SOURCE = "history"


def parse_port(port: str) -> Union[int, str]:
    """ASCII decimal ports become ``int``; anything else is returned unchanged."""
    raw = port.strip()
    if raw.isascii() and raw.isdecimal():
        return int(raw)
    return port


@dataclass(frozen=True)
class Endpoint:
    host: str
    # Manually entered ports are kept verbatim when they are not numeric.
    port: Union[int, str]

    @classmethod
    def from_strings(cls, host: str, port: str) -> "Endpoint":
        return cls(host.strip(), parse_port(port))

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


@dataclass(frozen=True)
class CandidateList:
    source: str
    endpoints: Tuple[Endpoint, ...] = ()

    def __len__(self) -> int:
        return len(self.endpoints)

    def __iter__(self):
        return iter(self.endpoints)

    def __getitem__(self, index: int) -> Endpoint:
        return self.endpoints[index]


HistoryRecord = Tuple[Endpoint, ...]


@dataclass(frozen=True)
class InputModeFlags:
    buttons: bool = True
    pen: bool = True
    touch: bool = True

    def toggle(self, kind: str) -> "InputModeFlags":
        if kind not in INPUT_KINDS:
            raise ValueError(f"Unknown input kind: {kind}")
        return replace(self, **{kind: not getattr(self, kind)})

    def viewer_flags(self) -> List[str]:
        return [f"--no-{kind}" for kind in INPUT_KINDS if not getattr(self, kind)]
