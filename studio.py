import asyncio
import logging
from typing import Protocol

from app_state import AppState, GenerationResult
from errors import GENERATION_FAILED_TEXT, GenerationError, ServiceInitError
from generation_client import GenerationClient
from input_controller import InputController
from ui_projector import ViewInstructions, project

logger = logging.getLogger(__name__)


class View(Protocol):
    def render(self, instructions: ViewInstructions) -> None: ...

    def warn(self, message: str) -> None: ...


class Studio:
    """Owns the session's AppState and runs the generate state machine.

    `client` is a GenerationClient, or None when the service could not be
    initialised; in that case generation stays disabled for the session.
    All methods must run on one event loop.
    """

    def __init__(self, client, view, state=None, init_error=None):
        self.client = client
        self.view = view
        self.state = state or AppState()
        self.controller = InputController(self.state, view, self.render)
        self._tasks = set()

        if client is None:
            message = (init_error or ServiceInitError()).user_message
            logger.error("Generation disabled for this session: %s", init_error)
            self.view.warn(message)

    @classmethod
    def from_env(cls, view):
        try:
            client = GenerationClient.from_env()
        except ServiceInitError as e:
            return cls(None, view, init_error=e)
        return cls(client, view)

    @property
    def service_available(self) -> bool:
        return self.client is not None

    def instructions(self) -> ViewInstructions:
        return project(self.state, service_available=self.service_available)

    def render(self) -> None:
        self.view.render(self.instructions())

    def snapshot(self) -> AppState:
        return self.state.snapshot()

    async def accept_file(self, file, role) -> bool:
        return await self.controller.accept_file(file, role)

    def can_generate(self) -> bool:
        return self.service_available and self.state.has_both_images and not self.state.is_loading

    async def generate(self, cancel=None) -> bool:
        """Run one generation to completion. A no-op returning False when not actionable."""
        if not self._begin():
            return False
        await self._run(cancel)
        return True

    def trigger_generate(self, cancel=None) -> bool:
        """Enter Generating now and finish in a background task on the running loop."""
        if not self._begin():
            return False
        task = asyncio.ensure_future(self._run(cancel))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return True

    async def wait_idle(self) -> None:
        if self._tasks:
            await asyncio.gather(*list(self._tasks))

    def _begin(self) -> bool:
        if not self.can_generate():
            logger.debug("Generate ignored (loading=%s)", self.state.is_loading)
            return False
        self.state.begin_generation()
        logger.info("Generation started")
        self.render()
        return True

    async def _run(self, cancel):
        result = GenerationResult(text=GENERATION_FAILED_TEXT)
        try:
            result = await self.client.generate(
                self.state.input_image, self.state.concept_image, cancel=cancel,
            )
        except GenerationError as e:
            logger.exception("Error during image generation: %s", e)
            self.view.warn(e.user_message)
        finally:
            self.state.complete_generation(result)
            self.render()
