"""Step state machine for the studio wizard.

Every transition is a pure function that takes the current ``WizardState`` and
returns a new one. A transition requested from the wrong step, or one whose
guard fails, raises ``InvalidTransition`` and the caller keeps the old state.
While a backend call is in flight (``Phase.BUSY``) only the matching
``complete_*``/``fail_*`` function is accepted; everything else raises
``SessionBusy``.

Prompt acquisition and generation are split in two: ``begin_*`` records the
user's choice and enters ``BUSY``; ``complete_*``/``fail_*`` return to
``IDLE`` with the outcome.
"""

from dataclasses import replace

from creative_director.domain.errors import InvalidTransition, SessionBusy
from creative_director.domain.images import ImageRef
from creative_director.domain.wizard import (
    CreativeDirection,
    ImageSize,
    Phase,
    PromptMode,
    SessionRecord,
    ShotType,
    Step,
    WizardState,
)

_ANALYSIS_STEPS = (Step.SYSTEM_DIRECTION, Step.PROMPT_PREVIEW)
_NOT_RESETTABLE = (Step.UPLOAD, Step.SESSION_END)


def _require_idle(state: WizardState, action: str, *steps: Step) -> None:
    if state.phase is Phase.BUSY:
        raise SessionBusy()
    if state.step not in steps:
        raise InvalidTransition(f"Cannot {action} from {state.step.value}")


def _require_busy(state: WizardState, action: str, *steps: Step) -> None:
    if state.phase is not Phase.BUSY or state.step not in steps:
        raise InvalidTransition(f"Cannot {action} from {state.step.value}")


def _move(
    state: WizardState,
    step: Step,
    session: SessionRecord | None = None,
    error: str | None = None,
) -> WizardState:
    return WizardState(
        step=step,
        session=session if session is not None else state.session,
        phase=Phase.IDLE,
        error=error,
    )


def upload_product(state: WizardState, image: ImageRef) -> WizardState:
    """Store or replace the product image."""
    _require_idle(state, "upload a product image", Step.UPLOAD)
    return _move(state, Step.UPLOAD, replace(state.session, product_image=image))


def upload_model(state: WizardState, image: ImageRef) -> WizardState:
    """Store or replace the model image."""
    _require_idle(state, "upload a model image", Step.UPLOAD)
    return _move(state, Step.UPLOAD, replace(state.session, model_image=image))


def confirm_upload(state: WizardState) -> WizardState:
    """Leave the upload step once both images are present."""
    _require_idle(state, "confirm the upload", Step.UPLOAD)
    session = state.session
    if session.product_image is None or session.model_image is None:
        raise InvalidTransition("Upload both a product image and a model image.")
    return _move(state, Step.SIZE_SELECTION)


def select_size(state: WizardState, size: ImageSize) -> WizardState:
    _require_idle(state, "select a size", Step.SIZE_SELECTION)
    return _move(
        state, Step.MODE_SELECTION, replace(state.session, selected_size=size)
    )


def select_mode(state: WizardState, mode: PromptMode) -> WizardState:
    """Pick who writes the prompt; the other mode's prompt is discarded."""
    _require_idle(state, "select a prompt mode", Step.MODE_SELECTION)
    if mode is PromptMode.USER:
        session = replace(
            state.session,
            prompt_mode=mode,
            system_prompt=None,
            creative_direction=None,
        )
        return _move(state, Step.USER_PROMPT_INPUT, session)
    session = replace(state.session, prompt_mode=mode, user_prompt=None)
    return _move(state, Step.SYSTEM_DIRECTION, session)


def update_user_prompt(state: WizardState, text: str) -> WizardState:
    _require_idle(state, "edit the prompt", Step.USER_PROMPT_INPUT)
    return _move(
        state, Step.USER_PROMPT_INPUT, replace(state.session, user_prompt=text)
    )


def proceed_with_user_prompt(state: WizardState) -> WizardState:
    """Accept the typed prompt; blank prompts are rejected."""
    _require_idle(state, "use the prompt", Step.USER_PROMPT_INPUT)
    text = (state.session.user_prompt or "").strip()
    if not text:
        raise InvalidTransition("Write a prompt before continuing.")
    return _move(state, Step.SHOT_TYPE, replace(state.session, user_prompt=text))


def cancel_prompt(state: WizardState) -> WizardState:
    _require_idle(
        state, "cancel the prompt", Step.USER_PROMPT_INPUT, Step.PROMPT_PREVIEW
    )
    return _move(state, Step.MODE_SELECTION)


def begin_analysis(
    state: WizardState, direction: CreativeDirection | None
) -> WizardState:
    """Record the creative direction and wait for a scene description.

    From ``SYSTEM_DIRECTION`` a direction must be picked; from
    ``PROMPT_PREVIEW`` the current direction is reused.
    """
    _require_idle(state, "generate a prompt", *_ANALYSIS_STEPS)
    if direction is None:
        raise InvalidTransition("Pick a creative direction first.")
    return WizardState(
        step=state.step,
        session=replace(state.session, creative_direction=direction),
        phase=Phase.BUSY,
        error=None,
    )


def complete_analysis(state: WizardState, prompt: str) -> WizardState:
    _require_busy(state, "finish the prompt", *_ANALYSIS_STEPS)
    return _move(
        state, Step.PROMPT_PREVIEW, replace(state.session, system_prompt=prompt)
    )


def fail_analysis(state: WizardState, message: str) -> WizardState:
    """Stay on the current step so the user can try again."""
    _require_busy(state, "fail the prompt", *_ANALYSIS_STEPS)
    return _move(state, state.step, error=message)


def proceed_with_system_prompt(state: WizardState) -> WizardState:
    _require_idle(state, "use the prompt", Step.PROMPT_PREVIEW)
    return _move(state, Step.SHOT_TYPE)


def _enter_generation(state: WizardState, shot_type: ShotType) -> WizardState:
    session = replace(state.session, shot_type=shot_type, generated_image=None)
    return WizardState(
        step=Step.GENERATING, session=session, phase=Phase.BUSY, error=None
    )


def begin_generation(state: WizardState, shot_type: ShotType) -> WizardState:
    _require_idle(state, "generate an image", Step.SHOT_TYPE)
    return _enter_generation(state, shot_type)


def begin_regeneration(state: WizardState) -> WizardState:
    """Generate again with the same prompt and shot type."""
    _require_idle(state, "regenerate", Step.RESULT)
    _require_success(state, "regenerate")
    # RESULT is only reachable through a generation, so shot_type is set.
    return _enter_generation(state, state.session.shot_type)


def complete_generation(state: WizardState, image: ImageRef) -> WizardState:
    _require_busy(state, "finish the generation", Step.GENERATING)
    return _move(state, Step.RESULT, replace(state.session, generated_image=image))


def fail_generation(state: WizardState, message: str) -> WizardState:
    """Land on the result step with the error instead of an image."""
    _require_busy(state, "fail the generation", Step.GENERATING)
    return _move(state, Step.RESULT, error=message)


def _require_success(state: WizardState, action: str) -> None:
    if state.error is not None:
        raise InvalidTransition(f"Cannot {action} after a failed generation")


def new_shot_type(state: WizardState) -> WizardState:
    _require_idle(state, "pick a new shot type", Step.RESULT)
    _require_success(state, "pick a new shot type")
    return _move(state, Step.SHOT_TYPE)


def new_creative_prompt(state: WizardState) -> WizardState:
    _require_idle(state, "write a new prompt", Step.RESULT)
    _require_success(state, "write a new prompt")
    return _move(state, Step.MODE_SELECTION)


def retry(state: WizardState) -> WizardState:
    """Go back to shot selection after a failed generation."""
    _require_idle(state, "retry", Step.RESULT)
    if state.error is None:
        raise InvalidTransition("Nothing to retry")
    return _move(state, Step.SHOT_TYPE)


def end_session(state: WizardState) -> WizardState:
    _require_idle(state, "end the session", Step.RESULT)
    return _move(state, Step.SESSION_END)


def restart(state: WizardState) -> WizardState:
    _require_idle(state, "restart", Step.SESSION_END)
    return WizardState()


def reset(state: WizardState) -> WizardState:
    """Wipe everything and go back to the upload step."""
    if state.phase is Phase.BUSY:
        raise SessionBusy()
    if state.step in _NOT_RESETTABLE:
        raise InvalidTransition(f"Cannot reset from {state.step.value}")
    return WizardState()


def available_actions(state: WizardState) -> tuple[str, ...]:
    """Return the action names accepted in the current state."""
    if state.phase is Phase.BUSY:
        return ()
    step = state.step
    if step is Step.UPLOAD:
        return ("upload_product", "upload_model", "confirm_upload")
    if step is Step.RESULT:
        if state.error is not None:
            return ("retry", "end_session", "reset")
        return (
            "regenerate_same",
            "new_shot_type",
            "new_creative_prompt",
            "end_session",
            "reset",
        )
    if step is Step.SESSION_END:
        return ("restart",)
    return (*_STEP_ACTIONS.get(step, ()), "reset")


_STEP_ACTIONS: dict[Step, tuple[str, ...]] = {
    Step.SIZE_SELECTION: ("select_size",),
    Step.MODE_SELECTION: ("select_mode",),
    Step.USER_PROMPT_INPUT: (
        "update_user_prompt",
        "proceed_with_user_prompt",
        "cancel_prompt",
    ),
    Step.SYSTEM_DIRECTION: ("pick_direction",),
    Step.PROMPT_PREVIEW: (
        "regenerate_prompt",
        "cancel_prompt",
        "proceed_with_system_prompt",
    ),
    Step.SHOT_TYPE: ("generate",),
}
