"""Studio session: owns the wizard state and runs backend calls."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import TypeVar
from uuid import UUID, uuid4

from creative_director.domain.errors import AnalysisFailure, GenerationFailure
from creative_director.domain.images import ImageRef
from creative_director.domain.wizard import (
    CreativeDirection,
    ImageSize,
    PromptMode,
    SessionRecord,
    ShotType,
    Step,
    WizardState,
)
from creative_director.services import wizard
from creative_director.services.generation import GenerationInvoker
from creative_director.services.prompts import (
    PromptStrategy,
    SceneDescriber,
    strategy_for,
)

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)


@dataclass
class StudioSession:
    """Single-user wizard session.

    The state is replaced only through ``services.wizard`` transitions. While a
    prompt or image request is in flight the state is ``BUSY`` and every other
    transition raises ``SessionBusy``.
    """

    describer: SceneDescriber
    invoker: GenerationInvoker
    id: UUID = field(default_factory=uuid4)
    state: WizardState = field(default_factory=WizardState)
    last_active_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))

    def current_step(self) -> Step:
        return self.state.step

    def current_session(self) -> SessionRecord:
        return self.state.session

    def is_loading(self) -> bool:
        return self.state.loading

    def last_error(self) -> str | None:
        return self.state.error

    def upload_product(self, image: ImageRef) -> None:
        self._apply(wizard.upload_product, image)

    def upload_model(self, image: ImageRef) -> None:
        self._apply(wizard.upload_model, image)

    def confirm_upload(self) -> None:
        self._apply(wizard.confirm_upload)

    def select_size(self, size: ImageSize) -> None:
        self._apply(wizard.select_size, size)

    def select_mode(self, mode: PromptMode) -> None:
        self._apply(wizard.select_mode, mode)

    def update_user_prompt(self, text: str) -> None:
        self._apply(wizard.update_user_prompt, text)

    def proceed_with_user_prompt(self) -> None:
        self._apply(wizard.proceed_with_user_prompt)

    def cancel_prompt(self) -> None:
        self._apply(wizard.cancel_prompt)

    async def pick_direction(self, direction: CreativeDirection) -> None:
        self._apply(wizard.begin_analysis, direction)
        await self._acquire_system_prompt()

    async def regenerate_prompt(self) -> None:
        self._apply(wizard.begin_analysis, self.state.session.creative_direction)
        await self._acquire_system_prompt()

    def proceed_with_system_prompt(self) -> None:
        self._apply(wizard.proceed_with_system_prompt)

    async def generate(self, shot_type: ShotType) -> None:
        prompt = self._strategy().active_prompt(self.state.session)
        self._apply(wizard.begin_generation, shot_type)
        await self._render(prompt)

    async def regenerate_same(self) -> None:
        prompt = self._strategy().active_prompt(self.state.session)
        self._apply(wizard.begin_regeneration)
        await self._render(prompt)

    def new_shot_type(self) -> None:
        self._apply(wizard.new_shot_type)

    def new_creative_prompt(self) -> None:
        self._apply(wizard.new_creative_prompt)

    def retry(self) -> None:
        self._apply(wizard.retry)

    def end_session(self) -> None:
        self._apply(wizard.end_session)

    def restart(self) -> None:
        self._apply(wizard.restart)

    def reset(self) -> None:
        self._apply(wizard.reset)

    async def perform(  # noqa: PLR0911, PLR0912
        self,
        action: str,
        value: str | None = None,
        *,
        image: ImageRef | None = None,
        text: str | None = None,
    ) -> None:
        """Run a transition by name, as sent by the presentation layer.

        Enum arguments are passed by member name (``"PORTRAIT"``). Unknown
        actions or values raise ``ValueError``.
        """
        if action in _NO_ARGUMENT_ACTIONS:
            getattr(self, action)()
            return
        if action in {"regenerate_prompt", "regenerate_same"}:
            await getattr(self, action)()
            return
        if action in {"upload_product", "upload_model"}:
            if image is None:
                raise ValueError(f"{action} requires an image")
            getattr(self, action)(image)
            return
        if action == "update_user_prompt":
            if text is None:
                raise ValueError("update_user_prompt requires text")
            self.update_user_prompt(text)
            return
        if action == "select_size":
            self.select_size(_parse_enum(ImageSize, value))
            return
        if action == "select_mode":
            self.select_mode(_parse_enum(PromptMode, value))
            return
        if action == "pick_direction":
            await self.pick_direction(_parse_enum(CreativeDirection, value))
            return
        if action == "generate":
            await self.generate(_parse_enum(ShotType, value))
            return
        raise ValueError(f"Unknown action: {action}")

    def _strategy(self) -> PromptStrategy:
        return strategy_for(self.state.session.prompt_mode, self.describer)

    async def _acquire_system_prompt(self) -> None:
        try:
            prompt = await self._strategy().acquire(self.state.session)
        except AnalysisFailure:
            self._apply(wizard.fail_analysis, AnalysisFailure.user_message)
            return
        self._apply(wizard.complete_analysis, prompt)

    async def _render(self, prompt: str) -> None:
        try:
            image = await self.invoker.invoke(self.state.session, prompt)
        except GenerationFailure:
            self._apply(wizard.fail_generation, GenerationFailure.user_message)
            return
        self._apply(wizard.complete_generation, image)

    def _apply(self, transition: Callable[..., WizardState], *args: object) -> None:
        self.state = transition(self.state, *args)
        self.last_active_at = datetime.now(tz=UTC)
        logger.info(
            "Studio transition %s -> %s",
            transition.__name__,
            self.state.step.value,
            extra={"session_id": str(self.id), "step": self.state.step.value},
        )


_NO_ARGUMENT_ACTIONS = frozenset(
    {
        "confirm_upload",
        "proceed_with_user_prompt",
        "cancel_prompt",
        "proceed_with_system_prompt",
        "new_shot_type",
        "new_creative_prompt",
        "retry",
        "end_session",
        "restart",
        "reset",
    }
)


def _parse_enum(enum_type: type[E], value: str | None) -> E:
    if value is None:
        raise ValueError(f"Missing {enum_type.__name__} value")
    try:
        return enum_type[value]
    except KeyError as exc:
        raise ValueError(f"Unknown {enum_type.__name__}: {value}") from exc
