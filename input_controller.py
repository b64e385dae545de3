import logging

import image_codec
from app_state import ROLES
from errors import InvalidFileType, ReadError

logger = logging.getLogger(__name__)


class InputController:
    """Single entry point for files, whether picked or dropped."""

    def __init__(self, state, view, render):
        self.state = state
        self.view = view
        self.render = render

    async def accept_file(self, file, role) -> bool:
        if role not in ROLES:
            raise ValueError(f"Unknown image role: {role!r}")

        if not image_codec.is_image(file):
            logger.warning(
                "Rejected %s file for %s image: %r",
                image_codec.declared_type(file) or "untyped", role, getattr(file, "filename", None),
            )
            self.view.warn(InvalidFileType.user_message)
            return False

        try:
            image = await image_codec.encode(file)
        except ReadError as e:
            logger.warning("Could not read %s image: %s", role, e)
            self.view.warn(e.user_message)
            return False

        self.state.set_image(role, image)
        logger.info("Accepted %s image (%s, %d base64 chars)", role, image.mime_type, len(image.data))
        self.render()
        return True
