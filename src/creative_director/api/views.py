"""What to show the user for each wizard step."""

from dataclasses import dataclass, field

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
from creative_director.services.wizard import available_actions

CALLBACK_PREFIX = "w"

SIZE_LABELS: dict[ImageSize, str] = {
    ImageSize.SQUARE: "Square",
    ImageSize.PORTRAIT: "Portrait (4:5)",
    ImageSize.REEL: "Reel / Story (9:16)",
    ImageSize.LANDSCAPE: "Landscape (16:9)",
}

STAGES: dict[Step, str] = {
    Step.UPLOAD: "Upload",
    Step.SIZE_SELECTION: "Size",
    Step.MODE_SELECTION: "Creative",
    Step.USER_PROMPT_INPUT: "Creative",
    Step.SYSTEM_DIRECTION: "Creative",
    Step.PROMPT_PREVIEW: "Creative",
    Step.SHOT_TYPE: "Shot",
    Step.GENERATING: "Production",
    Step.RESULT: "Production",
}


@dataclass(frozen=True)
class StepOption:
    """A button the user can press."""

    label: str
    action: str
    value: str | None = None

    def callback_data(self) -> str:
        """Encode as ``w:<action>[:<value>]`` (well under Telegram's 64 bytes)."""
        if self.value is None:
            return f"{CALLBACK_PREFIX}:{self.action}"
        return f"{CALLBACK_PREFIX}:{self.action}:{self.value}"


@dataclass(frozen=True)
class StepView:
    """Rendered step: heading, body, buttons and an optional image."""

    step: Step
    stage: str | None
    title: str
    body: str | None = None
    options: list[StepOption] = field(default_factory=list)
    loading: bool = False
    error: str | None = None
    image: ImageRef | None = None

    def as_text(self) -> str:
        """Flatten the view into a chat message."""
        lines = [self.title]
        if self.body:
            lines.append(self.body)
        if self.error and self.error != self.body:
            lines.append(self.error)
        return "\n\n".join(lines)


def shot_label(shot_type: ShotType) -> tuple[str, str]:
    """Split a shot type into its title and subtitle."""
    title, _, subtitle = shot_type.value.partition(" / ")
    return title, subtitle


def render_step(state: WizardState) -> StepView:  # noqa: PLR0911
    """Build the view for the current step."""
    step = state.step
    session = state.session
    stage = STAGES.get(step)
    if step is Step.UPLOAD:
        return StepView(
            step=step,
            stage=stage,
            title="Upload your assets",
            body=_upload_status(session),
            options=_upload_options(session),
            error=state.error,
        )
    if step is Step.SIZE_SELECTION:
        return StepView(
            step=step,
            stage=stage,
            title="Select output image size",
            options=[
                StepOption(f"{size.value} {label}", "select_size", size.name)
                for size, label in SIZE_LABELS.items()
            ],
        )
    if step is Step.MODE_SELECTION:
        return StepView(
            step=step,
            stage=stage,
            title="How would you like to generate images?",
            options=[
                StepOption(
                    "I will provide my own prompt",
                    "select_mode",
                    PromptMode.USER.name,
                ),
                StepOption(
                    "System generates creative prompts for me",
                    "select_mode",
                    PromptMode.SYSTEM.name,
                ),
                _start_over(),
            ],
        )
    if step is Step.USER_PROMPT_INPUT:
        return _user_prompt_view(state, stage)
    if step is Step.SYSTEM_DIRECTION:
        return StepView(
            step=step,
            stage=stage,
            title="Select creative direction",
            body="Analyzing visual assets..." if state.loading else None,
            options=[]
            if state.loading
            else [
                *(
                    StepOption(direction.value, "pick_direction", direction.name)
                    for direction in CreativeDirection
                ),
                _start_over(),
            ],
            loading=state.loading,
            error=state.error,
        )
    if step is Step.PROMPT_PREVIEW:
        return _prompt_preview_view(state, stage)
    if step is Step.SHOT_TYPE:
        return StepView(
            step=step,
            stage=stage,
            title="Select shot type",
            options=[
                *(
                    StepOption(
                        "{}: {}".format(*shot_label(shot_type)),
                        "generate",
                        shot_type.name,
                    )
                    for shot_type in ShotType
                ),
                _start_over(),
            ],
        )
    if step is Step.GENERATING:
        return StepView(
            step=step,
            stage=stage,
            title="Composing Commercial Masterpiece",
            body="Our AI creative team is rendering your vision...",
            loading=True,
        )
    if step is Step.RESULT:
        return _result_view(state, stage)
    return StepView(
        step=step,
        stage=stage,
        title="Session completed.",
        body=(
            "Your creative assets have been prepared. You can restart the engine "
            "anytime to build more campaigns."
        ),
        options=[StepOption("Start New Project", "restart")],
    )


def _start_over() -> StepOption:
    return StepOption("Start over", "reset")


def _upload_status(session: SessionRecord) -> str:
    product = "received" if session.product_image else "missing"
    model = "received" if session.model_image else "missing"
    return (
        f"Product image: {product}\n"
        f"Model image: {model}\n"
        "Send a photo captioned 'product' or 'model' to replace one."
    )


def _upload_options(session: SessionRecord) -> list[StepOption]:
    if session.product_image and session.model_image:
        return [StepOption("Save Assets & Continue", "confirm_upload")]
    return []


def _user_prompt_view(state: WizardState, stage: str | None) -> StepView:
    current = (state.session.user_prompt or "").strip()
    options = [StepOption("Cancel", "cancel_prompt")]
    if current:
        options.append(StepOption("Proceed to Shot Type", "proceed_with_user_prompt"))
    options.append(_start_over())
    return StepView(
        step=state.step,
        stage=stage,
        title="Paste your prompt here",
        body=current
        or (
            "e.g. A futuristic watch being worn by a sleek model in a cyberpunk "
            "neon-lit street..."
        ),
        options=options,
        error=state.error,
    )


def _prompt_preview_view(state: WizardState, stage: str | None) -> StepView:
    options = (
        []
        if state.loading
        else [
            StepOption("Regenerate Prompt", "regenerate_prompt"),
            StepOption("Cancel", "cancel_prompt"),
            StepOption("Next: Shot Type Selection", "proceed_with_system_prompt"),
            _start_over(),
        ]
    )
    return StepView(
        step=state.step,
        stage=stage,
        title="Creative prompt ready.",
        body=f'"{state.session.system_prompt}"',
        options=options,
        loading=state.loading,
        error=state.error,
    )


def _result_view(state: WizardState, stage: str | None) -> StepView:
    if state.error is not None:
        return StepView(
            step=state.step,
            stage=stage,
            title="Generation Failed",
            body=state.error,
            options=[
                StepOption("Retry Shot Selection", "retry"),
                StepOption("No - End Session", "end_session"),
            ],
            error=state.error,
        )
    return StepView(
        step=state.step,
        stage=stage,
        title="Generate next image?",
        options=[
            StepOption("Yes - Same Prompt", "regenerate_same"),
            StepOption("Yes - New Shot Type", "new_shot_type"),
            StepOption("Yes - New Creative Prompt", "new_creative_prompt"),
            StepOption("No - End Session", "end_session"),
        ],
        image=state.session.generated_image,
    )


def parse_callback(data: str) -> tuple[str, str | None] | None:
    """Parse callback data in the format ``w:<action>[:<value>]``."""
    parts = data.split(":", maxsplit=2)
    if len(parts) < 2 or parts[0] != CALLBACK_PREFIX or not parts[1]:  # noqa: PLR2004
        return None
    value = parts[2] if len(parts) > 2 else None  # noqa: PLR2004
    return parts[1], value


def inline_keyboard(options: list[StepOption]) -> dict | None:
    """Build a Telegram inline keyboard payload, one button per row."""
    if not options:
        return None
    return {
        "inline_keyboard": [
            [{"text": option.label, "callback_data": option.callback_data()}]
            for option in options
        ]
    }


def session_summary(key: str, state: WizardState) -> dict[str, object]:
    """Serialize a session without image bytes."""
    session = state.session
    return {
        "session_id": key,
        "step": state.step.value,
        "stage": STAGES.get(state.step),
        "loading": state.loading,
        "error": state.error,
        "actions": list(available_actions(state)),
        "record": {
            "has_product_image": session.product_image is not None,
            "has_model_image": session.model_image is not None,
            "selected_size": _enum_value(session.selected_size),
            "prompt_mode": _enum_value(session.prompt_mode),
            "user_prompt": session.user_prompt,
            "system_prompt": session.system_prompt,
            "creative_direction": _enum_value(session.creative_direction),
            "shot_type": _enum_value(session.shot_type),
            "has_generated_image": session.generated_image is not None,
        },
    }


def _enum_value(
    value: ImageSize | PromptMode | CreativeDirection | ShotType | None,
) -> str | None:
    return value.value if value is not None else None
