"""
Logo upload checks run before a file is accepted as the overlay source.
"""
from __future__ import annotations

import base64
import binascii
import io
import logging
from dataclasses import dataclass
from typing import Optional

from django import forms
from django.core.files.uploadedfile import SimpleUploadedFile
from PIL import Image, UnidentifiedImageError

from .conf import customizer_setting

logger = logging.getLogger(__name__)

SVG_NOTICE = "SVG detected. Best for sharp print results."
LOW_RESOLUTION_NOTICE = "Image resolution is acceptable but higher is recommended for best print."
UNSUPPORTED_FORMAT = "Unsupported format. Use PNG, JPG or SVG."
UNREADABLE_IMAGE = "Failed to load image. Please try a different file."
LOGO_NOT_UPLOADED = "Please upload your logo first."

_RASTER_EXTENSIONS = {".png": "image/png", ".jpg": "image/jpeg", ".jpeg": "image/jpeg"}
_RASTER_FORMATS = {"PNG": "image/png", "JPEG": "image/jpeg"}


class LogoRejected(Exception):
    """The upload failed a check; `message` is safe to show to the user."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


@dataclass(frozen=True)
class AcceptedLogo:
    data_url: str
    content_type: str
    is_vector: bool
    width: Optional[int] = None
    height: Optional[int] = None
    notice: Optional[str] = None


def _detect_content_type(uploaded) -> Optional[str]:
    declared = (getattr(uploaded, "content_type", "") or "").lower()
    name = (getattr(uploaded, "name", "") or "").lower()
    if "svg" in declared or name.endswith(".svg"):
        return "image/svg+xml"
    if "png" in declared:
        return "image/png"
    if "jpeg" in declared or "jpg" in declared:
        return "image/jpeg"
    for extension, content_type in _RASTER_EXTENSIONS.items():
        if name.endswith(extension):
            return content_type
    return None


def _read_all(uploaded) -> bytes:
    if hasattr(uploaded, "seek"):
        uploaded.seek(0)
    if hasattr(uploaded, "chunks"):
        return b"".join(uploaded.chunks())
    return uploaded.read()


def to_data_url(content: bytes, content_type: str) -> str:
    return f"data:{content_type};base64,{base64.b64encode(content).decode('ascii')}"


def inspect_logo(uploaded) -> AcceptedLogo:
    """
    Validate an uploaded logo and return it as a data URL.

    Checks, in order: size limit, format (PNG/JPEG raster or SVG), then for
    rasters the pixel dimensions. SVGs skip the dimension check.

    Raises:
        LogoRejected: with the user-facing reason; nothing is changed.
    """
    max_bytes = customizer_setting("MAX_LOGO_BYTES")
    size = getattr(uploaded, "size", None)
    if size is not None and size > max_bytes:
        raise LogoRejected(f"File too large. Max {max_bytes // (1024 * 1024)}MB.")

    content_type = _detect_content_type(uploaded)
    if content_type is None:
        raise LogoRejected(UNSUPPORTED_FORMAT)

    content = _read_all(uploaded)
    if len(content) > max_bytes:
        raise LogoRejected(f"File too large. Max {max_bytes // (1024 * 1024)}MB.")

    if content_type == "image/svg+xml":
        return AcceptedLogo(
            data_url=to_data_url(content, content_type),
            content_type=content_type,
            is_vector=True,
            notice=SVG_NOTICE,
        )

    try:
        with Image.open(io.BytesIO(content)) as image:
            width, height = image.size
            detected_format = image.format
    except (UnidentifiedImageError, OSError, Image.DecompressionBombError) as exc:
        logger.info("Rejected unreadable logo upload %r: %s", getattr(uploaded, "name", ""), exc)
        raise LogoRejected(UNREADABLE_IMAGE) from exc

    # Trust the decoded bytes, not the declared type or file name.
    content_type = _RASTER_FORMATS.get(detected_format)
    if content_type is None:
        raise LogoRejected(UNSUPPORTED_FORMAT)

    min_px = customizer_setting("MIN_LOGO_PX")
    if width < min_px or height < min_px:
        raise LogoRejected(f"Image too small. Minimum {min_px}x{min_px}px recommended.")

    recommended_px = customizer_setting("RECOMMENDED_LOGO_PX")
    notice = None
    if width < recommended_px or height < recommended_px:
        notice = LOW_RESOLUTION_NOTICE

    return AcceptedLogo(
        data_url=to_data_url(content, content_type),
        content_type=content_type,
        is_vector=False,
        width=width,
        height=height,
        notice=notice,
    )


def accept_logo_reference(ref: str) -> AcceptedLogo:
    """
    Re-run the upload checks on a logo the client sends back as a data URL.

    Only data URLs are accepted: a logo has to have gone through an upload,
    so remote URLs and storage paths are refused.

    Raises:
        LogoRejected: same messages as `inspect_logo`.
    """
    header, _, payload = (ref or "").partition(",")
    if not header.startswith("data:") or not header.endswith(";base64") or not payload:
        raise LogoRejected(LOGO_NOT_UPLOADED)
    content_type = header[len("data:"):-len(";base64")]
    try:
        content = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise LogoRejected(UNREADABLE_IMAGE) from exc

    extension = ".svg" if "svg" in content_type else ""
    return inspect_logo(SimpleUploadedFile(f"logo{extension}", content, content_type=content_type))


class LogoUploadForm(forms.Form):
    logo = forms.FileField()

    def clean_logo(self):
        uploaded = self.cleaned_data["logo"]
        try:
            self.accepted_logo = inspect_logo(uploaded)
        except LogoRejected as exc:
            raise forms.ValidationError(exc.message)
        return uploaded
