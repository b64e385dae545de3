import asyncio
import base64
import logging
import mimetypes
import os

from app_state import EncodedImage
from errors import InvalidFileType, ReadError

logger = logging.getLogger(__name__)


class LocalImageFile:
    """A file on disk that looks like an upload: a declared type and `read()`."""

    def __init__(self, path, mimetype=None):
        self.path = os.fspath(path)
        self.filename = os.path.basename(self.path)
        self.mimetype = mimetype or mimetypes.guess_type(self.path)[0] or ""

    def read(self):
        with open(self.path, "rb") as f:
            return f.read()


def declared_type(file):
    """MIME type the file claims to be, without parameters. Never sniffs bytes."""
    mimetype = getattr(file, "mimetype", None) or getattr(file, "content_type", None) or ""
    return mimetype.split(";", 1)[0].strip().lower()


def is_image(file):
    return declared_type(file).startswith("image/")


async def encode(file) -> EncodedImage:
    """Read the whole file off the event loop and base64 it.

    Callers check `is_image` first; a non-image here is a programming error
    and raises InvalidFileType. Any failure to read raises ReadError, and no
    EncodedImage is produced.
    """
    mimetype = declared_type(file)
    if not mimetype.startswith("image/"):
        raise InvalidFileType(f"Declared type {mimetype!r} is not an image")

    try:
        raw = await asyncio.to_thread(file.read)
    except Exception as e:
        raise ReadError(f"Reading {getattr(file, 'filename', file)!r} failed: {e}") from e

    if not raw:
        raise ReadError(f"{getattr(file, 'filename', file)!r} is empty")

    b64 = base64.b64encode(raw).decode("utf-8")
    logger.debug("Encoded %d bytes of %s", len(raw), mimetype)
    return EncodedImage(data=b64, mime_type=mimetype)
