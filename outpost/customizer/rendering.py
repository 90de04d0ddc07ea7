"""
Composite rendering: flattens a product photo and a logo into one PNG.

The raster is a visualisation aid only. Failures never raise; they come
back as an empty `CompositeResult` and callers keep the transform, which is
the source of truth.
"""
from __future__ import annotations

import base64
import binascii
import io
import logging
import struct
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlsplit

import requests
from asgiref.sync import sync_to_async
from django.conf import settings
from django.core.exceptions import SuspiciousFileOperation
from django.core.files.storage import default_storage
from django.http.request import validate_host
from PIL import Image, UnidentifiedImageError

from .conf import customizer_setting
from .overlay import OverlayTransform
from .uploads import to_data_url

logger = logging.getLogger(__name__)


class ImageLoadError(Exception):
    pass


@dataclass(frozen=True)
class CompositeResult:
    image: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return bool(self.image)


def _decode_data_url(ref: str) -> bytes:
    header, _, payload = ref.partition(",")
    if not payload:
        raise ImageLoadError("Empty data URL")
    if header.endswith(";base64"):
        try:
            return base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ImageLoadError(f"Bad base64 payload: {exc}") from exc
    return payload.encode("utf-8")


def _fetch_url(ref: str, timeout: float) -> bytes:
    try:
        response = requests.get(ref, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as exc:
        raise ImageLoadError(f"Could not fetch {ref}: {exc}") from exc
    return response.content


def _read_storage(ref: str) -> bytes:
    name = ref
    media_url = getattr(settings, "MEDIA_URL", "") or ""
    if media_url and name.startswith(media_url):
        name = name[len(media_url):]
    try:
        with default_storage.open(name.lstrip("/"), "rb") as handle:
            return handle.read()
    except (OSError, ValueError, SuspiciousFileOperation) as exc:
        raise ImageLoadError(f"Could not open {ref}: {exc}") from exc


def is_allowed_image_url(ref: str) -> bool:
    """
    Only hosts listed in CUSTOMIZER['ALLOWED_IMAGE_HOSTS'] are fetched.
    Entries follow ALLOWED_HOSTS syntax ('.example.com' matches subdomains).
    """
    host = urlsplit(ref).hostname or ""
    allowed = customizer_setting("ALLOWED_IMAGE_HOSTS") or []
    return bool(host) and validate_host(host, allowed)


def read_image_bytes(ref: str, timeout: Optional[float] = None) -> bytes:
    """Raw bytes of an image reference: data URL, http(s) URL or media path."""
    if not ref:
        raise ImageLoadError("No image reference")
    if ref.startswith("data:"):
        return _decode_data_url(ref)
    if ref.startswith(("http://", "https://")):
        if not is_allowed_image_url(ref):
            raise ImageLoadError(f"Image host not allowed: {ref}")
        if timeout is None:
            timeout = customizer_setting("IMAGE_FETCH_TIMEOUT")
        return _fetch_url(ref, timeout)
    return _read_storage(ref)


def decode_image(ref: str, timeout: Optional[float] = None) -> Image.Image:
    content = read_image_bytes(ref, timeout)
    # Pillow reports malformed chunks found during load() as SyntaxError.
    try:
        with Image.open(io.BytesIO(content)) as image:
            image.load()
            return image.convert("RGBA")
    except (
        UnidentifiedImageError,
        OSError,
        ValueError,
        SyntaxError,
        IndexError,
        struct.error,
        Image.DecompressionBombError,
    ) as exc:
        raise ImageLoadError(f"Could not decode image: {exc}") from exc


async def load_image(ref: str, timeout: Optional[float] = None) -> Image.Image:
    return await sync_to_async(decode_image, thread_sensitive=False)(ref, timeout)


def flatten(base: Image.Image, overlay: Image.Image, transform: OverlayTransform, canvas_size: int) -> Image.Image:
    """
    Draw `base` stretched to a square canvas, then the overlay on top.

    The overlay is treated as square (height == width == scale% of the
    canvas) and centred on the transform's position. Opacity and rotation
    (clockwise, about the overlay centre) are applied as in the live view.
    """
    canvas = Image.new("RGBA", (canvas_size, canvas_size), (0, 0, 0, 0))
    canvas.alpha_composite(base.convert("RGBA").resize((canvas_size, canvas_size), Image.Resampling.LANCZOS))

    logo_size = max(1, round(transform.scale_pct / 100 * canvas_size))
    logo = overlay.convert("RGBA").resize((logo_size, logo_size), Image.Resampling.LANCZOS)

    if transform.opacity < 1:
        alpha = logo.getchannel("A").point(lambda value: round(value * transform.opacity))
        logo.putalpha(alpha)
    if transform.rotation_deg:
        # PIL rotates counter-clockwise; CSS rotate() is clockwise.
        logo = logo.rotate(-transform.rotation_deg, resample=Image.Resampling.BICUBIC, expand=True)

    center_x = transform.position_x / 100 * canvas_size
    center_y = transform.position_y / 100 * canvas_size
    origin = (round(center_x - logo.width / 2), round(center_y - logo.height / 2))

    layer = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
    layer.paste(logo, origin, logo)
    return Image.alpha_composite(canvas, layer)


def encode_png_data_url(image: Image.Image) -> str:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG", optimize=True)
    return to_data_url(buffer.getvalue(), "image/png")


class CompositeRenderer:
    """
    Renders frozen previews for captures.

    Args:
        canvas_size: Side of the square output in pixels (CANVAS_SIZE setting by default).
        fetch_timeout: Timeout for http(s) image references.
    """

    def __init__(self, canvas_size: Optional[int] = None, fetch_timeout: Optional[float] = None):
        self.canvas_size = canvas_size or customizer_setting("CANVAS_SIZE")
        self.fetch_timeout = fetch_timeout if fetch_timeout is not None else customizer_setting("IMAGE_FETCH_TIMEOUT")

    async def render(self, base_image: str, transform: OverlayTransform) -> CompositeResult:
        try:
            base = await load_image(base_image, self.fetch_timeout)
            overlay = await load_image(transform.source_image, self.fetch_timeout)
        except ImageLoadError as exc:
            logger.warning("Composite skipped, image decode failed: %s", exc)
            return CompositeResult(error=str(exc))
        except Exception as exc:
            logger.warning("Composite skipped, unexpected error loading images: %s", exc, exc_info=exc)
            return CompositeResult(error=f"Could not decode image: {exc}")

        # Previews are optional; nothing raised while drawing may reach the session.
        try:
            return CompositeResult(image=await sync_to_async(self._render_sync, thread_sensitive=False)(base, overlay, transform))
        except Exception as exc:
            logger.warning("Composite render unavailable: %s", exc, exc_info=exc)
            return CompositeResult(error="Render unavailable")

    def _render_sync(self, base: Image.Image, overlay: Image.Image, transform: OverlayTransform) -> str:
        return encode_png_data_url(flatten(base, overlay, transform, self.canvas_size))
