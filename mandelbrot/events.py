"""Gestures and control-panel inputs consumed by the controller."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional, Union


class MouseButton(enum.Enum):
    LEFT = "left"
    RIGHT = "right"


class KeyAction(enum.Enum):
    UNDO = "undo"
    RESET = "reset"
    SAVE = "save"


@dataclass(frozen=True)
class Press:
    x: float
    y: float
    button: MouseButton = MouseButton.LEFT


@dataclass(frozen=True)
class Drag:
    x: float
    y: float
    button: MouseButton = MouseButton.LEFT


@dataclass(frozen=True)
class Release:
    x: float
    y: float
    button: MouseButton = MouseButton.LEFT


@dataclass(frozen=True)
class Wheel:
    """Wheel step; positive zooms in, negative zooms out."""

    delta: float


@dataclass(frozen=True)
class Key:
    action: KeyAction
    path: Optional[str] = None


@dataclass(frozen=True)
class ControlChange:
    """New slider values; ``None`` leaves the corresponding parameter unchanged."""

    max_iter: Optional[int] = None
    color_offset: Optional[float] = None


@dataclass(frozen=True)
class Reset:
    pass


@dataclass(frozen=True)
class Undo:
    pass


@dataclass(frozen=True)
class Save:
    path: str


Gesture = Union[Press, Drag, Release, Wheel, Key, ControlChange, Reset, Undo, Save]
