"""Domain models for the studio wizard."""

from dataclasses import dataclass
from enum import Enum

from creative_director.domain.images import ImageRef


class ImageSize(Enum):
    """Output aspect ratios."""

    SQUARE = "1:1"
    PORTRAIT = "4:5"
    REEL = "9:16"
    LANDSCAPE = "16:9"


class PromptMode(Enum):
    """Who writes the scene prompt."""

    USER = "USER"
    SYSTEM = "SYSTEM"


class CreativeDirection(Enum):
    """Creative brief used when the system writes the prompt."""

    SAFE_CLEAN = "Safe / Clean Commercial"
    BOLD_IMPACT = "Bold / High-Impact Ad"
    LIFESTYLE = "Lifestyle / Natural"
    EXPERIMENTAL = "Experimental / Creative"


class ShotType(Enum):
    """Shot style appended to every generation request."""

    CLOSE_UP = "Close-up / Product Focus"
    LIFESTYLE_INTERACTION = "Lifestyle / Model Interaction"
    ACTION = "Action / Motion Shot"
    HERO = "Hero / Ad Key Visual"


class Step(Enum):
    """Wizard steps."""

    UPLOAD = "UPLOAD"
    SIZE_SELECTION = "SIZE_SELECTION"
    MODE_SELECTION = "MODE_SELECTION"
    USER_PROMPT_INPUT = "USER_PROMPT_INPUT"
    SYSTEM_DIRECTION = "SYSTEM_DIRECTION"
    PROMPT_PREVIEW = "PROMPT_PREVIEW"
    SHOT_TYPE = "SHOT_TYPE"
    GENERATING = "GENERATING"
    RESULT = "RESULT"
    SESSION_END = "SESSION_END"


class Phase(Enum):
    """Whether a backend call is in flight."""

    IDLE = "IDLE"
    BUSY = "BUSY"


@dataclass(frozen=True)
class SessionRecord:
    """Everything the wizard has collected so far."""

    product_image: ImageRef | None = None
    model_image: ImageRef | None = None
    selected_size: ImageSize | None = None
    prompt_mode: PromptMode | None = None
    user_prompt: str | None = None
    system_prompt: str | None = None
    creative_direction: CreativeDirection | None = None
    shot_type: ShotType | None = None
    generated_image: ImageRef | None = None

    def is_empty(self) -> bool:
        """Return true when no field has been set."""
        return self == SessionRecord()


@dataclass(frozen=True)
class WizardState:
    """Current step, collected data and busy flag."""

    step: Step = Step.UPLOAD
    session: SessionRecord = SessionRecord()
    phase: Phase = Phase.IDLE
    error: str | None = None

    @property
    def loading(self) -> bool:
        return self.phase is Phase.BUSY
