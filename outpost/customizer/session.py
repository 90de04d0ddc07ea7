"""
One "preview my logo across the order" workflow.

A `CustomizationSession` walks the cart lines one at a time. Each line keeps
its own overlay transform and colour override; moving away from a line
freezes it into an `ItemCapture` with a rendered composite. Only lines the
customer actually opened are returned by `finalize()`.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from .overlay import ContainerRect, DragController, OverlayTransform, TransientPosition
from .rendering import CompositeRenderer
from .uploads import AcceptedLogo, inspect_logo

logger = logging.getLogger(__name__)

DEFAULT_LINE_COLOR = "Black"


class SessionClosed(Exception):
    """The session was abandoned; its results must not be used."""


class LineSwitchInProgress(RuntimeError):
    """An edit arrived while the active line was being frozen."""


@dataclass(frozen=True)
class CartLine:
    line_id: str
    name: str
    image: str = ""
    selected_color: str = DEFAULT_LINE_COLOR
    style_code: str = ""
    brand: str = ""
    # colour name -> product photo in that colour
    color_images: Mapping[str, str] = field(default_factory=dict)

    def image_for(self, colour: Optional[str]) -> str:
        if colour:
            if colour in self.color_images:
                return self.color_images[colour]
            wanted = colour.casefold()
            for name, image in self.color_images.items():
                if name.casefold() == wanted:
                    return image
        return self.image


@dataclass(frozen=True)
class ItemCapture:
    line_id: str
    product_name: str
    selected_color: str
    color_changed: bool
    original_color: str
    transform: OverlayTransform
    preview_image: Optional[str] = None

    @property
    def color_override(self) -> Optional[str]:
        return self.selected_color if self.color_changed else None

    def to_wire(self) -> dict:
        return {
            "lineId": self.line_id,
            "productName": self.product_name,
            "selectedColor": self.selected_color,
            "colorChanged": self.color_changed,
            "originalColor": self.original_color,
            "transform": {
                "x": self.transform.position_x,
                "y": self.transform.position_y,
                "scale": self.transform.scale_pct,
            },
            "previewImage": self.preview_image,
        }


@dataclass(frozen=True)
class ProceedOutcome:
    needs_confirmation: bool
    captures: Tuple[ItemCapture, ...] = ()


class CustomizationSession:
    """
    Per-line logo placement across an order.

    Line switches and finalisation are serialised by a lock and always wait
    for the outgoing line's composite, so a capture is never stored blank
    because of a switch. Edits made while a switch or finalisation is running
    raise `LineSwitchInProgress` instead of landing on a line that is already
    captured. A render that finishes after `abandon()` is dropped.
    """

    def __init__(self, logo_src: str, lines: Sequence[CartLine], *, renderer: Optional[CompositeRenderer] = None):
        self.logo_src = logo_src or ""
        self._lines: Tuple[CartLine, ...] = tuple(lines)
        self._renderer = renderer or CompositeRenderer()
        self._captures: Dict[str, ItemCapture] = {}
        self._interacted: set = set()
        self._active_index: Optional[int] = None
        self._color_override: Optional[str] = None
        self._drag = DragController(OverlayTransform.default(self.logo_src))
        self._lock = asyncio.Lock()
        self._closed = False

        if self._lines:
            self._activate(0)

    # State

    @property
    def lines(self) -> Tuple[CartLine, ...]:
        return self._lines

    @property
    def is_open(self) -> bool:
        return not self._closed

    @property
    def active_index(self) -> Optional[int]:
        return self._active_index

    @property
    def active_line(self) -> Optional[CartLine]:
        if self._active_index is None:
            return None
        return self._lines[self._active_index]

    @property
    def transform(self) -> OverlayTransform:
        return self._drag.committed

    @property
    def transient(self) -> Optional[TransientPosition]:
        return self._drag.transient

    @property
    def original_color(self) -> str:
        line = self.active_line
        return line.selected_color if line else DEFAULT_LINE_COLOR

    @property
    def current_color(self) -> str:
        return self._color_override or self.original_color

    @property
    def color_changed(self) -> bool:
        return self._color_override is not None

    @property
    def interacted_line_ids(self) -> Tuple[str, ...]:
        return tuple(line.line_id for line in self._lines if line.line_id in self._interacted)

    @property
    def captures(self) -> Mapping[str, ItemCapture]:
        return MappingProxyType(dict(self._captures))

    def _ensure_open(self):
        if self._closed:
            raise SessionClosed("Customization session was abandoned")

    def _ensure_editable(self):
        self._ensure_open()
        if self._lock.locked():
            raise LineSwitchInProgress("Wait for the line switch to finish before editing")

    # Transform edits on the active line

    def _commit(self, transform: OverlayTransform) -> OverlayTransform:
        self._ensure_editable()
        self._drag.replace_committed(transform)
        return transform

    def set_position(self, x: float, y: float) -> OverlayTransform:
        return self._commit(self.transform.moved_to(x, y))

    def set_scale(self, scale_pct: float) -> OverlayTransform:
        return self._commit(self.transform.with_scale(scale_pct))

    def set_rotation(self, rotation_deg: float) -> OverlayTransform:
        return self._commit(self.transform.with_rotation(rotation_deg))

    def set_opacity(self, opacity: float) -> OverlayTransform:
        return self._commit(self.transform.with_opacity(opacity))

    def reset(self) -> OverlayTransform:
        return self._commit(self.transform.reset())

    def reset_all(self) -> OverlayTransform:
        return self._commit(self.transform.reset_all())

    def apply_transform(self, transform: OverlayTransform) -> OverlayTransform:
        """Take over position, scale, rotation and opacity; the source stays the session logo."""
        return self._commit(transform.with_source(self.logo_src))

    # Drag

    def begin_drag(self, client_x: float, client_y: float, rect: ContainerRect) -> bool:
        self._ensure_editable()
        return self._drag.begin(client_x, client_y, rect)

    def drag_move(self, client_x: float, client_y: float) -> bool:
        self._ensure_editable()
        return self._drag.move(client_x, client_y)

    def flush_frame(self, rect: Optional[ContainerRect] = None) -> Optional[TransientPosition]:
        self._ensure_editable()
        return self._drag.flush_frame(rect)

    def end_drag(self) -> OverlayTransform:
        self._ensure_editable()
        return self._drag.end()

    # Colour

    def set_color_override(self, colour: Optional[str]) -> None:
        """``None`` or the line's own colour clears the override."""
        self._ensure_editable()
        if not colour or colour == self.original_color:
            self._color_override = None
        else:
            self._color_override = colour

    def has_any_color_change(self) -> bool:
        active = self.active_line
        for line_id, capture in self._captures.items():
            if active is not None and line_id == active.line_id:
                continue
            if capture.color_changed:
                return True
        return self.color_changed

    # Logo

    def replace_logo(self, uploaded) -> AcceptedLogo:
        """
        Swap the overlay source for a new upload.

        Raises:
            LogoRejected: the upload failed a check; the current logo stays.
        """
        self._ensure_editable()
        accepted = inspect_logo(uploaded)
        self.logo_src = accepted.data_url
        self._drag.replace_committed(self.transform.with_source(self.logo_src))
        return accepted

    # Line switching

    def _activate(self, index: int) -> None:
        line = self._lines[index]
        capture = self._captures.get(line.line_id)
        if capture is not None:
            transform = capture.transform.with_source(self.logo_src)
            self._color_override = capture.color_override
        else:
            transform = OverlayTransform.default(self.logo_src)
            self._color_override = None
        self._drag = DragController(transform)
        self._active_index = index
        self._interacted.add(line.line_id)

    async def _persist_active(self) -> None:
        line = self.active_line
        if line is None:
            return
        self._drag.end()
        transform = self.transform
        colour = self.current_color
        color_changed = self.color_changed

        result = await self._renderer.render(line.image_for(colour), transform)
        if self._closed:
            logger.debug("Dropping composite for %s, session abandoned", line.line_id)
            raise SessionClosed("Customization session was abandoned")

        self._captures[line.line_id] = ItemCapture(
            line_id=line.line_id,
            product_name=line.name,
            selected_color=colour,
            color_changed=color_changed,
            original_color=line.selected_color,
            transform=transform,
            preview_image=result.image,
        )

    async def select_line(self, index: int) -> CartLine:
        """
        Freeze the active line into a capture, then make ``index`` active.

        Raises:
            IndexError: no such line.
            SessionClosed: the session was abandoned, possibly mid-render.
        """
        self._ensure_open()
        if not 0 <= index < len(self._lines):
            raise IndexError(f"Line index {index} out of range")
        async with self._lock:
            if index != self._active_index:
                await self._persist_active()
                self._activate(index)
        return self._lines[index]

    def index_of(self, line_id: str) -> int:
        for index, line in enumerate(self._lines):
            if line.line_id == line_id:
                return index
        raise KeyError(line_id)

    async def finalize(self) -> List[ItemCapture]:
        """Captures of every line that was ever active, in cart order."""
        self._ensure_open()
        async with self._lock:
            await self._persist_active()
            captures = [
                self._captures[line.line_id]
                for line in self._lines
                if line.line_id in self._interacted and line.line_id in self._captures
            ]
        logger.info(
            "Finalized customization: %d of %d lines, %d without preview",
            len(captures),
            len(self._lines),
            sum(1 for capture in captures if not capture.preview_image),
        )
        return captures

    async def proceed(self, confirmed: bool = False) -> ProceedOutcome:
        """
        Finish the workflow. A colour override only changes the preview, never
        the order line, so it has to be acknowledged with ``confirmed=True``.
        """
        self._ensure_open()
        if self.has_any_color_change() and not confirmed:
            return ProceedOutcome(needs_confirmation=True)
        return ProceedOutcome(needs_confirmation=False, captures=tuple(await self.finalize()))

    def abandon(self) -> None:
        self._closed = True
        self._drag.cancel()
