import asyncio
import io
from types import SimpleNamespace

import pytest
from PIL import Image

from errors import GenerationError


def image_bytes(fmt="PNG", color=(200, 40, 40)):
    buf = io.BytesIO()
    Image.new("RGB", (8, 8), color=color).save(buf, format=fmt)
    return buf.getvalue()


class FakeUpload:
    def __init__(self, data, mimetype, filename="upload", fail=False):
        self.data = data
        self.mimetype = mimetype
        self.filename = filename
        self.fail = fail

    def read(self):
        if self.fail:
            raise OSError("disk went away")
        return self.data


class RecordingView:
    def __init__(self):
        self.renders = []
        self.warnings = []

    def render(self, instructions):
        self.renders.append(instructions)

    def warn(self, message):
        self.warnings.append(message)


class FakeGenerationClient:
    """Stands in for GenerationClient; returns `result` or raises `error`."""

    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls = []
        self.on_call = None

    async def generate(self, input_image, concept_image, cancel=None):
        self.calls.append((input_image, concept_image))
        if self.on_call:
            await self.on_call()
        if self.error:
            raise self.error
        return self.result


def text_part(text):
    return SimpleNamespace(text=text, inline_data=None)


def image_part(data, mime_type="image/png"):
    return SimpleNamespace(text=None, inline_data=SimpleNamespace(data=data, mime_type=mime_type))


def fake_response(*parts):
    return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=list(parts)))])


class FakeModels:
    def __init__(self, response=None, error=None, hang=False):
        self.response = response
        self.error = error
        self.hang = hang
        self.requests = []

    async def generate_content(self, model, contents, config):
        self.requests.append({"model": model, "contents": contents, "config": config})
        if self.hang:
            await asyncio.Event().wait()
        if self.error:
            raise self.error
        return self.response


def fake_genai(**kwargs):
    return SimpleNamespace(aio=SimpleNamespace(models=FakeModels(**kwargs)))


@pytest.fixture
def jpeg_upload():
    return FakeUpload(image_bytes("JPEG"), "image/jpeg", filename="photo.jpg")


@pytest.fixture
def png_upload():
    return FakeUpload(image_bytes("PNG", color=(20, 90, 200)), "image/png", filename="painting.png")


@pytest.fixture
def text_upload():
    return FakeUpload(b"just some notes", "text/plain", filename="notes.txt")


@pytest.fixture
def view():
    return RecordingView()


@pytest.fixture
def failing_client():
    return FakeGenerationClient(error=GenerationError("service unavailable"))
