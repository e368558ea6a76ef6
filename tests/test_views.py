"""Tests for step rendering."""

from creative_director.api.views import (
    StepOption,
    inline_keyboard,
    parse_callback,
    render_step,
    shot_label,
)
from creative_director.domain.wizard import (
    Phase,
    PromptMode,
    SessionRecord,
    ShotType,
    Step,
    WizardState,
)


def test_callback_data_round_trip() -> None:
    option = StepOption("Square", "select_size", "SQUARE")

    assert option.callback_data() == "w:select_size:SQUARE"
    assert parse_callback("w:select_size:SQUARE") == ("select_size", "SQUARE")
    assert parse_callback("w:reset") == ("reset", None)
    assert parse_callback("s:1234:confirm") is None
    assert parse_callback("w:") is None


def test_size_step_lists_all_sizes() -> None:
    view = render_step(WizardState(step=Step.SIZE_SELECTION))

    assert [option.value for option in view.options] == [
        "SQUARE",
        "PORTRAIT",
        "REEL",
        "LANDSCAPE",
    ]
    assert view.options[1].label == "4:5 Portrait (4:5)"


def test_direction_step_hides_buttons_while_loading() -> None:
    state = WizardState(step=Step.SYSTEM_DIRECTION, phase=Phase.BUSY)

    view = render_step(state)

    assert view.loading is True
    assert view.options == []
    assert inline_keyboard(view.options) is None
    assert view.body == "Analyzing visual assets..."


def test_user_prompt_step_offers_proceed_once_text_exists() -> None:
    empty = render_step(WizardState(step=Step.USER_PROMPT_INPUT))
    filled = render_step(
        WizardState(
            step=Step.USER_PROMPT_INPUT,
            session=SessionRecord(prompt_mode=PromptMode.USER, user_prompt="scene"),
        )
    )

    assert "proceed_with_user_prompt" not in [o.action for o in empty.options]
    assert "proceed_with_user_prompt" in [o.action for o in filled.options]
    assert filled.body == "scene"


def test_shot_label_splits_title() -> None:
    assert shot_label(ShotType.ACTION) == ("Action", "Motion Shot")


def test_session_end_offers_restart() -> None:
    view = render_step(WizardState(step=Step.SESSION_END))

    assert view.title == "Session completed."
    assert view.stage is None
    assert inline_keyboard(view.options) == {
        "inline_keyboard": [
            [{"text": "Start New Project", "callback_data": "w:restart"}]
        ]
    }
