import argparse
import asyncio
import base64
import io
import logging
import os
import sys

from dotenv import load_dotenv
from PIL import Image

from image_codec import LocalImageFile
from studio import Studio

logger = logging.getLogger(__name__)


class ConsoleView:
    def __init__(self, stream=None):
        self.stream = stream or sys.stderr
        self.warnings = []

    def render(self, instructions):
        if instructions.show_loader:
            print("Generating...", file=self.stream)

    def warn(self, message):
        self.warnings.append(message)
        print(f"Warning: {message}", file=self.stream)


def save_result(image, path):
    """Write the returned image, converting to whatever format the extension names."""
    raw = base64.b64decode(image.data)
    img = Image.open(io.BytesIO(raw))
    if os.path.splitext(path)[1].lower() in (".jpg", ".jpeg") and img.mode not in ("RGB", "L"):
        img = img.convert("RGB")
    img.save(path)
    return path


async def run(content, style, output, view):
    studio = Studio.from_env(view)
    if not studio.service_available:
        return 1

    await studio.accept_file(LocalImageFile(content), "input")
    await studio.accept_file(LocalImageFile(style), "concept")
    if not await studio.generate():
        return 1

    result = studio.state.result
    if result.text:
        print(result.text)
    if result.image is None:
        return 1

    save_result(result.image, output)
    print(f"Saved {output}")
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="stylize",
        description="Repaint a content image in the style of a reference image.",
    )
    parser.add_argument("content", help="image whose subject matter is kept")
    parser.add_argument("style", help="image whose palette, texture and style are transferred")
    parser.add_argument("-o", "--output", default="stylized.png", help="where to write the result (default: %(default)s)")
    parser.add_argument("-v", "--verbose", action="store_true", help="log debug output")
    args = parser.parse_args(argv)

    load_dotenv()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    return asyncio.run(run(args.content, args.style, args.output, ConsoleView()))


if __name__ == "__main__":
    sys.exit(main())
