"""Opaque image handles passed between presentation, core and backends."""

import base64
import binascii
from dataclasses import dataclass

_DATA_URL_PREFIX = "data:"


@dataclass(frozen=True)
class ImageRef:
    """Uploaded or generated image; the core never looks inside ``data``."""

    data: bytes
    mime_type: str = "image/png"

    def __repr__(self) -> str:
        return f"ImageRef(mime_type={self.mime_type!r}, size={len(self.data)})"

    @classmethod
    def from_bytes(cls, data: bytes) -> "ImageRef":
        """Wrap raw bytes, inferring the MIME type from the file signature."""
        return cls(data=data, mime_type=detect_mime_type(data))

    @classmethod
    def from_base64(cls, encoded: str, mime_type: str | None = None) -> "ImageRef":
        """Decode a bare base64 payload."""
        try:
            data = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValueError("Image payload is not valid base64") from exc
        if not data:
            raise ValueError("Image payload is empty")
        return cls(data=data, mime_type=mime_type or detect_mime_type(data))

    @classmethod
    def from_data_url(cls, data_url: str) -> "ImageRef":
        """Parse a ``data:<mime>;base64,<payload>`` URL."""
        if not data_url.startswith(_DATA_URL_PREFIX) or "," not in data_url:
            raise ValueError("Expected a base64 data URL")
        header, encoded = data_url[len(_DATA_URL_PREFIX) :].split(",", maxsplit=1)
        mime_type, _, encoding = header.partition(";")
        if encoding != "base64":
            raise ValueError("Only base64 data URLs are supported")
        return cls.from_base64(encoded, mime_type or None)

    def to_base64(self) -> str:
        """Return the payload as a base64 string."""
        return base64.b64encode(self.data).decode("utf-8")

    def to_data_url(self) -> str:
        """Return the image as a base64 data URL."""
        return f"data:{self.mime_type};base64,{self.to_base64()}"


def detect_mime_type(data: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if data.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if data.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
