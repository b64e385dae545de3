INVALID_FILE_MESSAGE = "Please select an image file."
READ_ERROR_MESSAGE = "Could not read the image file."
SERVICE_INIT_MESSAGE = "Could not initialize the AI. Please check the API key configuration."
GENERATION_ERROR_MESSAGE = "An error occurred while generating the image. Please try again."
GENERATION_FAILED_TEXT = "Generation failed."


class StudioError(Exception):
    """Base error; `user_message` is what the page or terminal shows."""

    user_message = "Something went wrong."

    def __init__(self, detail=None):
        super().__init__(detail or self.user_message)
        self.detail = detail


class InvalidFileType(StudioError):
    user_message = INVALID_FILE_MESSAGE


class ReadError(StudioError):
    user_message = READ_ERROR_MESSAGE


class ServiceInitError(StudioError):
    user_message = SERVICE_INIT_MESSAGE


class GenerationError(StudioError):
    user_message = GENERATION_ERROR_MESSAGE
