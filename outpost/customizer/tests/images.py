"""
In-memory test images.
"""
import io
import struct
import zlib

from django.core.files.uploadedfile import SimpleUploadedFile
from PIL import Image

from customizer.uploads import to_data_url

SVG_LOGO = (
    b'<svg xmlns="http://www.w3.org/2000/svg" width="10" height="10">'
    b'<rect width="10" height="10" fill="#000"/></svg>'
)


def png_bytes(size=(10, 10), colour=(255, 0, 0, 255)):
    buffer = io.BytesIO()
    Image.new("RGBA", size, colour).save(buffer, format="PNG")
    return buffer.getvalue()


def png_data_url(size=(10, 10), colour=(255, 0, 0, 255)):
    return to_data_url(png_bytes(size, colour), "image/png")


def png_upload(side, name="logo.png"):
    return SimpleUploadedFile(name, png_bytes((side, side), (0, 0, 0, 255)), content_type="image/png")


def svg_upload(name="logo.svg"):
    return SimpleUploadedFile(name, SVG_LOGO, content_type="image/svg+xml")


def _png_chunk(kind, data):
    return struct.pack(">I", len(data)) + kind + data + struct.pack(">I", zlib.crc32(kind + data))


def corrupt_png_bytes(size=(40, 40), colour=(255, 255, 255, 255)):
    """A PNG whose pixel data continues in a chunk with a garbage type."""
    content = png_bytes(size, colour)
    chunks, offset = [], 8
    while offset < len(content):
        (length,) = struct.unpack(">I", content[offset:offset + 4])
        kind = content[offset + 4:offset + 8]
        data = content[offset + 8:offset + 8 + length]
        if kind == b"IDAT":
            half = len(data) // 2
            chunks.append(_png_chunk(b"IDAT", data[:half]))
            chunks.append(_png_chunk(b"\x00\x01\x02\x03", data[half:]))
        else:
            chunks.append(_png_chunk(kind, data))
        offset += 12 + length
    return content[:8] + b"".join(chunks)


def gif_bytes(size=(900, 900)):
    buffer = io.BytesIO()
    Image.new("RGB", size, (0, 0, 0)).save(buffer, format="GIF")
    return buffer.getvalue()
