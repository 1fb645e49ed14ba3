"""Session state and event records for the Aesthetic Lab.

The session is modelled as an immutable :class:`LabState` that only changes
by applying one of the event records below through
:func:`aestheticlab.ui.state.apply_event`.
"""

from dataclasses import dataclass, field

from aestheticlab.core.catalog import DEFAULT_PARAMETER, AestheticParameter
from aestheticlab.core.models import (
    GenerationResult,
    PromptHistoryEntry,
    PromptPreset,
)


GENERATION_ERROR_MESSAGE = (
    "Sorry, we couldn't generate the images. The model might be busy or there "
    "was a network issue. Please try again in a moment."
)


@dataclass(frozen=True)
class FormState:
    """The editable generation form.

    ``variations`` is always a subset of the active parameter's catalog.
    """

    base_prompt: str = ""
    parameter: AestheticParameter = DEFAULT_PARAMETER
    variations: tuple[str, ...] = ()
    temperature: float = 0.5
    seed: int | None = None

    def has_prompt(self) -> bool:
        """Check if the base prompt has non-whitespace content."""
        return bool(self.base_prompt and self.base_prompt.strip())


@dataclass(frozen=True)
class LabState:
    """Complete state of one lab session.

    Attributes
    ----------
    form : FormState
        Current form values
    generations : tuple[GenerationResult, ...]
        Completed batches, newest first
    presets : tuple[PromptPreset, ...]
        Saved presets, newest first
    prompt_history : tuple[PromptHistoryEntry, ...]
        Submitted configurations, newest first
    selected_generation_id : str | None
        Explicit history selection; None follows the newest generation
    error : str | None
        User-visible failure message of the last batch
    pending_batches : int
        Number of batches dispatched and not yet settled
    """

    form: FormState = field(default_factory=FormState)
    generations: tuple[GenerationResult, ...] = ()
    presets: tuple[PromptPreset, ...] = ()
    prompt_history: tuple[PromptHistoryEntry, ...] = ()
    selected_generation_id: str | None = None
    error: str | None = None
    pending_batches: int = 0

    @property
    def is_loading(self) -> bool:
        return self.pending_batches > 0

    @property
    def can_submit(self) -> bool:
        """Whether the submit action is enabled."""
        return self.form.has_prompt() and bool(self.form.variations)

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"LabState(generations={len(self.generations)}, "
            f"presets={len(self.presets)}, "
            f"prompt_history={len(self.prompt_history)}, "
            f"pending={self.pending_batches}, "
            f"error={self.error is not None})"
        )


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BasePromptChanged:
    text: str


@dataclass(frozen=True)
class ParameterChanged:
    parameter: AestheticParameter


@dataclass(frozen=True)
class VariationToggled:
    variation: str


@dataclass(frozen=True)
class TemperatureChanged:
    temperature: float


@dataclass(frozen=True)
class SeedChanged:
    seed: int | None


@dataclass(frozen=True)
class ConfigurationLoaded:
    """Copy a preset, prompt-history entry or example into the form."""

    configuration: PromptPreset | PromptHistoryEntry


@dataclass(frozen=True)
class GenerationRequested:
    """A batch was dispatched; *entry* records the attempt."""

    entry: PromptHistoryEntry


@dataclass(frozen=True)
class GenerationSucceeded:
    result: GenerationResult


@dataclass(frozen=True)
class GenerationFailed:
    message: str = GENERATION_ERROR_MESSAGE


@dataclass(frozen=True)
class PresetSaved:
    preset: PromptPreset


@dataclass(frozen=True)
class PresetDeleted:
    preset_id: str


@dataclass(frozen=True)
class PromptHistoryDeleted:
    entry_id: str


@dataclass(frozen=True)
class GenerationSelected:
    generation_id: str


@dataclass(frozen=True)
class ImageRated:
    image_id: str
    rating: int


LabEvent = (
    BasePromptChanged
    | ParameterChanged
    | VariationToggled
    | TemperatureChanged
    | SeedChanged
    | ConfigurationLoaded
    | GenerationRequested
    | GenerationSucceeded
    | GenerationFailed
    | PresetSaved
    | PresetDeleted
    | PromptHistoryDeleted
    | GenerationSelected
    | ImageRated
)
