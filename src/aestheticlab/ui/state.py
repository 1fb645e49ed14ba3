"""State transitions for a lab session.

Every change to a :class:`LabState` goes through :func:`apply_event`, a pure
``(state, event) -> state`` reducer.  Side effects (network calls,
persistence) live in :mod:`aestheticlab.ui.session`, which decides what to
persist by comparing collection identities with :func:`changed_collections`.
"""

import logging
from dataclasses import replace

from aestheticlab.core.catalog import (
    DEFAULT_PARAMETER,
    AestheticParameter,
    prune_variations,
    toggle_variation,
)
from aestheticlab.core.config import AestheticLabConfig
from aestheticlab.core.history import prepend, rate_image, remove_by_id
from aestheticlab.core.models import GenerationResult, PromptHistoryEntry, PromptPreset
from aestheticlab.core.storage import (
    GENERATIONS_KEY,
    PRESETS_KEY,
    PROMPT_HISTORY_KEY,
    KeyValueStore,
    load_collection,
)

from .models import (
    BasePromptChanged,
    ConfigurationLoaded,
    FormState,
    GenerationFailed,
    GenerationRequested,
    GenerationSelected,
    GenerationSucceeded,
    ImageRated,
    LabEvent,
    LabState,
    ParameterChanged,
    PresetDeleted,
    PresetSaved,
    PromptHistoryDeleted,
    SeedChanged,
    TemperatureChanged,
    VariationToggled,
)

logger = logging.getLogger(__name__)


def initialize_lab_state(store: KeyValueStore, config: AestheticLabConfig) -> LabState:
    """Build the initial session state from the durable store.

    Each collection is read once.  Missing or corrupt data yields an empty
    collection; see :func:`aestheticlab.core.storage.load_collection`.

    Args:
        store: Durable store to read from
        config: Configuration providing the initial form temperature

    Returns:
        Initial LabState
    """
    state = LabState(
        form=FormState(temperature=config.default_temperature),
        generations=load_collection(store, GENERATIONS_KEY, GenerationResult),
        presets=load_collection(store, PRESETS_KEY, PromptPreset),
        prompt_history=load_collection(store, PROMPT_HISTORY_KEY, PromptHistoryEntry),
    )
    logger.info(f"Loaded session state: {state!r}")
    return state


def _clamp_temperature(value: float) -> float:
    return min(max(float(value), 0.0), 1.0)


def _load_form(configuration: PromptPreset | PromptHistoryEntry) -> FormState:
    parameter = AestheticParameter(configuration.parameter or DEFAULT_PARAMETER)
    return FormState(
        base_prompt=configuration.base_prompt or "",
        parameter=parameter,
        variations=prune_variations(configuration.variations, parameter),
        temperature=_clamp_temperature(configuration.temperature),
        seed=configuration.seed,
    )


def apply_event(state: LabState, event: LabEvent) -> LabState:
    """Apply *event* to *state* and return the resulting state.

    Unknown events and events that change nothing return *state* itself.

    Args:
        state: Current session state
        event: The event to apply

    Returns:
        The next session state
    """
    form = state.form

    if isinstance(event, BasePromptChanged):
        return replace(state, form=replace(form, base_prompt=event.text))

    if isinstance(event, ParameterChanged):
        parameter = AestheticParameter(event.parameter)
        return replace(
            state,
            form=replace(
                form,
                parameter=parameter,
                variations=prune_variations(form.variations, parameter),
            ),
        )

    if isinstance(event, VariationToggled):
        variations = toggle_variation(form.variations, event.variation, form.parameter)
        if variations is form.variations:
            logger.debug(f"Ignoring variation outside catalog: {event.variation}")
            return state
        return replace(state, form=replace(form, variations=variations))

    if isinstance(event, TemperatureChanged):
        return replace(
            state, form=replace(form, temperature=_clamp_temperature(event.temperature))
        )

    if isinstance(event, SeedChanged):
        return replace(state, form=replace(form, seed=event.seed))

    if isinstance(event, ConfigurationLoaded):
        return replace(state, form=_load_form(event.configuration))

    if isinstance(event, GenerationRequested):
        return replace(
            state,
            prompt_history=prepend(state.prompt_history, event.entry),
            pending_batches=state.pending_batches + 1,
            error=None,
        )

    if isinstance(event, GenerationSucceeded):
        return replace(
            state,
            generations=prepend(state.generations, event.result),
            selected_generation_id=event.result.id,
            pending_batches=max(state.pending_batches - 1, 0),
        )

    if isinstance(event, GenerationFailed):
        return replace(
            state,
            error=event.message,
            pending_batches=max(state.pending_batches - 1, 0),
        )

    if isinstance(event, PresetSaved):
        return replace(state, presets=prepend(state.presets, event.preset))

    if isinstance(event, PresetDeleted):
        presets = remove_by_id(state.presets, event.preset_id)
        return state if presets is state.presets else replace(state, presets=presets)

    if isinstance(event, PromptHistoryDeleted):
        entries = remove_by_id(state.prompt_history, event.entry_id)
        if entries is state.prompt_history:
            return state
        return replace(state, prompt_history=entries)

    if isinstance(event, GenerationSelected):
        return replace(state, selected_generation_id=event.generation_id)

    if isinstance(event, ImageRated):
        generations = rate_image(state.generations, event.image_id, event.rating)
        if generations is state.generations:
            return state
        return replace(state, generations=generations)

    logger.warning(f"Ignoring unknown event: {event!r}")
    return state


def changed_collections(previous: LabState, current: LabState) -> list[str]:
    """List the store keys whose collections differ between two states.

    Collections are compared by identity; the reducer only builds a new tuple
    when a collection actually changes.
    """
    changed = []
    if previous.generations is not current.generations:
        changed.append(GENERATIONS_KEY)
    if previous.presets is not current.presets:
        changed.append(PRESETS_KEY)
    if previous.prompt_history is not current.prompt_history:
        changed.append(PROMPT_HISTORY_KEY)
    return changed
