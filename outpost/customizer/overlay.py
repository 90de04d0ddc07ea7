"""
Overlay geometry: where a logo sits on a product photo, and the drag maths.

All positions are percentages of the container. `position_x`/`position_y`
locate the overlay's centre; `scale_pct` is its width relative to the
container width.
"""
from __future__ import annotations

import enum
import math
from dataclasses import dataclass, replace
from typing import Optional, Tuple

POSITION_MIN = 0.0
POSITION_MAX = 100.0
# The nominal centre never gets closer than 10% to an edge while dragging.
DRAG_MIN = 10.0
DRAG_MAX = 90.0
MIN_SCALE_PCT = 1.0
MAX_SCALE_PCT = 100.0
ROTATION_MIN = -180.0
ROTATION_MAX = 180.0
OPACITY_MIN = 0.0
OPACITY_MAX = 1.0

DEFAULT_POSITION = (50.0, 50.0)
DEFAULT_SCALE_PCT = 20.0
DEFAULT_ROTATION = 0.0
DEFAULT_OPACITY = 1.0


class InvalidTransform(ValueError):
    pass


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _finite(name: str, value) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidTransform(f"{name} must be a number, got {value!r}") from None
    if not math.isfinite(number):
        raise InvalidTransform(f"{name} must be finite, got {value!r}")
    return number


@dataclass(frozen=True)
class OverlayTransform:
    """
    Committed placement of the overlay. Immutable; every edit returns a copy.
    """

    source_image: str = ""
    position_x: float = DEFAULT_POSITION[0]
    position_y: float = DEFAULT_POSITION[1]
    scale_pct: float = DEFAULT_SCALE_PCT
    rotation_deg: float = DEFAULT_ROTATION
    opacity: float = DEFAULT_OPACITY

    def __post_init__(self):
        x = _finite("position_x", self.position_x)
        y = _finite("position_y", self.position_y)
        scale = _finite("scale_pct", self.scale_pct)
        rotation = _finite("rotation_deg", self.rotation_deg)
        opacity = _finite("opacity", self.opacity)

        if not (POSITION_MIN <= x <= POSITION_MAX and POSITION_MIN <= y <= POSITION_MAX):
            raise InvalidTransform(f"position ({x}, {y}) outside [0, 100]")
        if not 0 < scale <= MAX_SCALE_PCT:
            raise InvalidTransform(f"scale_pct {scale} outside (0, 100]")
        if not ROTATION_MIN <= rotation <= ROTATION_MAX:
            raise InvalidTransform(f"rotation_deg {rotation} outside [-180, 180]")
        if not OPACITY_MIN <= opacity <= OPACITY_MAX:
            raise InvalidTransform(f"opacity {opacity} outside [0, 1]")

        object.__setattr__(self, "source_image", self.source_image or "")
        object.__setattr__(self, "position_x", x)
        object.__setattr__(self, "position_y", y)
        object.__setattr__(self, "scale_pct", scale)
        object.__setattr__(self, "rotation_deg", rotation)
        object.__setattr__(self, "opacity", opacity)

    @classmethod
    def default(cls, source_image: str = "") -> "OverlayTransform":
        return cls(source_image=source_image)

    @property
    def center(self) -> Tuple[float, float]:
        return self.position_x, self.position_y

    def moved_to(self, x: float, y: float) -> "OverlayTransform":
        return replace(
            self,
            position_x=clamp(_finite("x", x), POSITION_MIN, POSITION_MAX),
            position_y=clamp(_finite("y", y), POSITION_MIN, POSITION_MAX),
        )

    def with_scale(self, scale_pct: float) -> "OverlayTransform":
        return replace(self, scale_pct=clamp(_finite("scale_pct", scale_pct), MIN_SCALE_PCT, MAX_SCALE_PCT))

    def with_rotation(self, rotation_deg: float) -> "OverlayTransform":
        return replace(self, rotation_deg=clamp(_finite("rotation_deg", rotation_deg), ROTATION_MIN, ROTATION_MAX))

    def with_opacity(self, opacity: float) -> "OverlayTransform":
        return replace(self, opacity=clamp(_finite("opacity", opacity), OPACITY_MIN, OPACITY_MAX))

    def with_source(self, source_image: str) -> "OverlayTransform":
        return replace(self, source_image=source_image or "")

    def reset(self) -> "OverlayTransform":
        """Back to the centre at default size; rotation and opacity are kept."""
        return replace(
            self,
            position_x=DEFAULT_POSITION[0],
            position_y=DEFAULT_POSITION[1],
            scale_pct=DEFAULT_SCALE_PCT,
        )

    def reset_all(self) -> "OverlayTransform":
        return OverlayTransform.default(self.source_image)

    def to_wire(self) -> dict:
        return {
            "src": self.source_image,
            "x": self.position_x,
            "y": self.position_y,
            "sizePct": self.scale_pct,
            "rotation": self.rotation_deg,
            "opacity": self.opacity,
        }

    @classmethod
    def from_wire(cls, data: dict) -> "OverlayTransform":
        return cls(
            source_image=data.get("src") or "",
            position_x=data.get("x", DEFAULT_POSITION[0]),
            position_y=data.get("y", DEFAULT_POSITION[1]),
            scale_pct=data.get("sizePct", DEFAULT_SCALE_PCT),
            rotation_deg=data.get("rotation", DEFAULT_ROTATION),
            opacity=data.get("opacity", DEFAULT_OPACITY),
        )


@dataclass(frozen=True)
class ContainerRect:
    """Client-space box of the preview container (a bounding client rect)."""

    left: float
    top: float
    width: float
    height: float

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def to_percent(self, client_x: float, client_y: float) -> Tuple[float, float]:
        return (
            (client_x - self.left) / self.width * 100,
            (client_y - self.top) / self.height * 100,
        )


@dataclass(frozen=True)
class TransientPosition:
    """
    Per-frame overlay centre while a drag is in progress.

    Lives only inside a `DragController`; it becomes part of the committed
    `OverlayTransform` when the drag ends.
    """

    x: float
    y: float


class DragState(enum.Enum):
    IDLE = "idle"
    DRAGGING = "dragging"


class DragController:
    """
    Pointer drag of the overlay: idle -> dragging -> idle.

    Pointer moves are coalesced: `move()` only records the latest pointer,
    and `flush_frame()` turns it into at most one `TransientPosition` per
    animation frame. The committed transform changes only in `end()`.
    """

    def __init__(self, transform: OverlayTransform):
        self._committed = transform
        self._state = DragState.IDLE
        self._offset = (0.0, 0.0)
        self._rect: Optional[ContainerRect] = None
        self._pending_pointer: Optional[Tuple[float, float]] = None
        self._transient: Optional[TransientPosition] = None

    @property
    def committed(self) -> OverlayTransform:
        return self._committed

    @property
    def state(self) -> DragState:
        return self._state

    @property
    def is_dragging(self) -> bool:
        return self._state is DragState.DRAGGING

    @property
    def transient(self) -> Optional[TransientPosition]:
        return self._transient

    @property
    def frame_pending(self) -> bool:
        return self._pending_pointer is not None

    def replace_committed(self, transform: OverlayTransform) -> None:
        """
        Swap in a new committed transform (scale/rotation/opacity edits)
        without interrupting a drag in progress.
        """
        self._committed = transform

    def begin(self, client_x: float, client_y: float, rect: ContainerRect) -> bool:
        if rect.is_empty:
            return False
        pointer_x, pointer_y = rect.to_percent(client_x, client_y)
        center_x, center_y = self._committed.center
        self._offset = (pointer_x - center_x, pointer_y - center_y)
        self._rect = rect
        self._pending_pointer = None
        self._transient = TransientPosition(center_x, center_y)
        self._state = DragState.DRAGGING
        return True

    def move(self, client_x: float, client_y: float) -> bool:
        """
        Record a pointer move. Returns True when a frame update needs
        scheduling, False when the move was coalesced into a pending one
        (or no drag is active).
        """
        if not self.is_dragging:
            return False
        already_pending = self._pending_pointer is not None
        self._pending_pointer = (client_x, client_y)
        return not already_pending

    def flush_frame(self, rect: Optional[ContainerRect] = None) -> Optional[TransientPosition]:
        """Apply the pending pointer for this frame, if any."""
        if not self.is_dragging or self._pending_pointer is None:
            return None
        rect = rect or self._rect
        client_x, client_y = self._pending_pointer
        self._pending_pointer = None
        if rect is None or rect.is_empty:
            return self._transient
        self._rect = rect

        pointer_x, pointer_y = rect.to_percent(client_x, client_y)
        offset_x, offset_y = self._offset
        self._transient = TransientPosition(
            clamp(pointer_x - offset_x, DRAG_MIN, DRAG_MAX),
            clamp(pointer_y - offset_y, DRAG_MIN, DRAG_MAX),
        )
        return self._transient

    def end(self) -> OverlayTransform:
        """Pointer up/cancel: commit the last computed position."""
        if not self.is_dragging:
            return self._committed
        self.flush_frame()
        if self._transient is not None:
            self._committed = self._committed.moved_to(self._transient.x, self._transient.y)
        self._state = DragState.IDLE
        self._pending_pointer = None
        self._transient = None
        self._rect = None
        return self._committed

    cancel = end
