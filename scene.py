"""Declarative scene documents for the line-oriented UI renderer.

A scene is a list of directive lines. ``@name args`` lines set attributes
that apply to every widget added after them; ``[kind x y w h label]`` lines
place one widget. Lines are emitted in call order, which is also the render
and tab order on the device.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from constants import LAYOUT


@dataclass(frozen=True)
class SceneDocument:
    directives: Tuple[str, ...]

    def serialize(self) -> str:
        return "".join(f"{line}\n" for line in self.directives)

    def __iter__(self):
        return iter(self.directives)

    def __len__(self) -> int:
        return len(self.directives)


def _flatten(value: object) -> str:
    return " ".join(str(value).split())


class SceneBuilder:
    def __init__(self, font_size: int = LAYOUT.FONT_SIZE) -> None:
        self.font_size = font_size
        self._directives: List[str] = []
        self.reset()

    def reset(self) -> "SceneBuilder":
        self._directives = [f"@fontsize {self.font_size}"]
        return self

    def set_attribute(self, name: str, *values: object) -> "SceneBuilder":
        parts = [f"@{name}"] + [_flatten(v) for v in values]
        self._directives.append(" ".join(parts))
        return self

    def add_widget(
        self,
        kind: str,
        x: object,
        y: object,
        w: object,
        h: object,
        label: str = "",
        widget_id: Optional[str] = None,
    ) -> "SceneBuilder":
        # Coordinates are passed through as-is; off-canvas values are the caller's problem.
        head = f"{kind}:{widget_id}" if widget_id else kind
        fields = [head, str(x), str(y), str(w), str(h)]
        text = _flatten(label)
        if text:
            fields.append(text)
        self._directives.append("[" + " ".join(fields) + "]")
        return self

    def build(self) -> SceneDocument:
        return SceneDocument(tuple(self._directives))
