"""Interactive lab session.

:class:`LabSession` is the single control point of the lab.  It owns the
current :class:`LabState`, applies events through the pure reducer, runs
generation batches, and hands persistence off to a background worker.

Concurrency
-----------
The session runs on one asyncio event loop.  Only batch dispatch suspends;
every other operation is synchronous, so state is only ever mutated from
the loop thread and no locking is needed.  Two overlapping submissions are
two independent batches.

Persistence
-----------
After each accepted event, every collection whose identity changed is
snapshotted and queued for writing.  The worker writes snapshots in order
off the event loop.  A failed write is logged and otherwise ignored; the
in-memory state is never rolled back.  Before :meth:`LabSession.start` is
awaited (or after :meth:`LabSession.stop`), writes happen inline.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import uuid
from collections.abc import Callable
from datetime import datetime

from aestheticlab.core.assembler import AssemblyError, assemble_generation
from aestheticlab.core.blueprint import derive_blueprint
from aestheticlab.core.catalog import AestheticParameter
from aestheticlab.core.config import AestheticLabConfig
from aestheticlab.core.generation_client import (
    GenerationClient,
    GenerationFailure,
    ImageProvider,
)
from aestheticlab.core.history import (
    filter_prompt_history,
    find_by_id,
    resolve_displayed_generation,
)
from aestheticlab.core.models import (
    GenerationResult,
    PromptHistoryEntry,
    PromptPreset,
)
from aestheticlab.core.prompt_expander import expand_prompts
from aestheticlab.core.storage import (
    GENERATIONS_KEY,
    PRESETS_KEY,
    PROMPT_HISTORY_KEY,
    KeyValueStore,
    save_collection,
)

from .models import (
    BasePromptChanged,
    ConfigurationLoaded,
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
from .state import apply_event, changed_collections, initialize_lab_state
from .validation import (
    ValidationError,
    validate_preset_name,
    validate_rating,
    validate_submission,
)

logger = logging.getLogger(__name__)


def _new_uuid() -> str:
    return str(uuid.uuid4())


class LabSession:
    """State owner and orchestrator for one lab.

    Args:
        config: Lab configuration
        provider: Per-prompt image provider
        store: Durable store for the three collections
        new_id: Identifier factory (defaults to random UUID4 strings)
        clock: Wall clock used for timestamps (defaults to ``datetime.now``)
    """

    def __init__(
        self,
        config: AestheticLabConfig,
        provider: ImageProvider,
        store: KeyValueStore,
        *,
        new_id: Callable[[], str] = _new_uuid,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.config = config
        self.store = store
        self.client = GenerationClient(provider)
        self._new_id = new_id
        self._clock = clock
        self._state = initialize_lab_state(store, config)
        self._persist_queue: asyncio.Queue | None = None
        self._worker: asyncio.Task | None = None

    @property
    def state(self) -> LabState:
        return self._state

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Start the background persistence worker."""
        if self._worker is not None:
            return
        self._persist_queue = asyncio.Queue()
        self._worker = asyncio.create_task(self._persistence_worker())
        logger.info("Persistence worker started")

    async def flush(self) -> None:
        """Wait until every queued write has been attempted."""
        if self._persist_queue is not None:
            await self._persist_queue.join()

    async def stop(self) -> None:
        """Drain pending writes and stop the persistence worker."""
        if self._worker is None:
            return
        await self.flush()
        self._worker.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._worker
        self._worker = None
        self._persist_queue = None
        logger.info("Persistence worker stopped")

    # ------------------------------------------------------------------
    # Event application and persistence
    # ------------------------------------------------------------------

    def dispatch(self, event: LabEvent) -> LabState:
        """Apply *event* and schedule persistence of changed collections.

        Returns:
            The new state
        """
        previous = self._state
        self._state = apply_event(previous, event)
        for key in changed_collections(previous, self._state):
            self._schedule_persist(key)
        return self._state

    def _collection(self, key: str) -> tuple:
        if key == GENERATIONS_KEY:
            return self._state.generations
        if key == PRESETS_KEY:
            return self._state.presets
        if key == PROMPT_HISTORY_KEY:
            return self._state.prompt_history
        raise KeyError(key)

    def _schedule_persist(self, key: str) -> None:
        # Tuples of frozen records are safe to hand to the worker as-is
        snapshot = self._collection(key)
        if self._persist_queue is None:
            self._persist(key, snapshot)
        else:
            self._persist_queue.put_nowait((key, snapshot))

    def _persist(self, key: str, records: tuple) -> None:
        try:
            save_collection(self.store, key, records)
        except Exception as e:
            logger.error(f"Failed to persist {key}: {e}", exc_info=True)

    async def _persistence_worker(self) -> None:
        queue = self._persist_queue
        while True:
            key, records = await queue.get()
            try:
                await asyncio.to_thread(self._persist, key, records)
            finally:
                queue.task_done()

    def _timestamp(self) -> str:
        return self._clock().isoformat(timespec="seconds")

    # ------------------------------------------------------------------
    # Form
    # ------------------------------------------------------------------

    def set_base_prompt(self, text: str) -> LabState:
        return self.dispatch(BasePromptChanged(text))

    def set_parameter(self, parameter: AestheticParameter) -> LabState:
        """Switch the varied parameter, pruning now-invalid selections."""
        return self.dispatch(ParameterChanged(AestheticParameter(parameter)))

    def toggle_variation(self, variation: str) -> LabState:
        return self.dispatch(VariationToggled(variation))

    def set_temperature(self, temperature: float) -> LabState:
        return self.dispatch(TemperatureChanged(temperature))

    def set_seed(self, seed: int | None) -> LabState:
        return self.dispatch(SeedChanged(seed))

    def load_configuration(self, configuration: PromptPreset | PromptHistoryEntry) -> LabState:
        """Copy a preset, prompt-history entry or example into the form."""
        return self.dispatch(ConfigurationLoaded(configuration))

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    async def submit(self) -> GenerationResult | None:
        """Dispatch the current form as a batch.

        The prompt-history entry is recorded before the batch is sent and is
        kept whatever the outcome.

        Returns:
            The new generation, or None if the batch failed (the failure
            message is then available as ``state.error``)

        Raises:
            ValidationError: If the form cannot be submitted; nothing is
                recorded or sent in that case
        """
        form = self._state.form
        try:
            validate_submission(form)
        except ValidationError as e:
            logger.warning(f"Submission rejected: {e}")
            raise

        entry = PromptHistoryEntry(
            id=self._new_id(),
            base_prompt=form.base_prompt,
            parameter=form.parameter,
            variations=form.variations,
            temperature=form.temperature,
            timestamp=self._timestamp(),
            seed=form.seed,
        )
        self.dispatch(GenerationRequested(entry))

        prompts = expand_prompts(form.base_prompt, form.parameter, form.variations)
        logger.info(
            f"Generating {len(prompts)} images varying {form.parameter.value} "
            f"for '{form.base_prompt}'"
        )

        try:
            payloads = await self.client.generate(prompts, form.temperature, form.seed)
            result = assemble_generation(
                form.base_prompt,
                form.parameter,
                form.variations,
                payloads,
                form.temperature,
                form.seed,
                now=self._clock(),
                new_id=self._new_id,
            )
        except (GenerationFailure, AssemblyError) as e:
            logger.error(f"Failed to generate images: {e}", exc_info=True)
            self.dispatch(GenerationFailed())
            return None
        except BaseException:
            # Cancellation or an unexpected error still settles the batch
            logger.error("Generation aborted", exc_info=True)
            self.dispatch(GenerationFailed())
            raise

        self.dispatch(GenerationSucceeded(result))
        logger.info(f"Generation {result.id} complete")
        return result

    def select_generation(self, generation_id: str) -> bool:
        """Select a generation from history.

        Returns:
            False if no generation has that id (the selection is unchanged)
        """
        if find_by_id(self._state.generations, generation_id) is None:
            return False
        self.dispatch(GenerationSelected(generation_id))
        return True

    def displayed_generation(self) -> GenerationResult | None:
        """Resolve the generation currently shown in the results view."""
        return resolve_displayed_generation(
            self._state.generations,
            self._state.selected_generation_id,
            self._state.error,
        )

    def rate_image(self, image_id: str, rating: int) -> LabState:
        """Toggle the rating of an image; unknown ids leave state unchanged.

        Raises:
            ValidationError: If the rating is outside 1-5
        """
        validate_rating(rating)
        return self.dispatch(ImageRated(image_id, rating))

    def blueprint(self, generation_id: str | None = None) -> str | None:
        """Derive the style blueprint of a generation.

        Args:
            generation_id: Generation to summarise; defaults to the displayed one
        """
        if generation_id is None:
            generation = self.displayed_generation()
        else:
            generation = find_by_id(self._state.generations, generation_id)
        return derive_blueprint(generation)

    # ------------------------------------------------------------------
    # Presets and prompt history
    # ------------------------------------------------------------------

    def save_preset(self, name: str | None) -> PromptPreset:
        """Save the current form as a named preset.

        Raises:
            ValidationError: If the name is empty or whitespace
        """
        try:
            name = validate_preset_name(name)
        except ValidationError as e:
            logger.warning(f"Preset rejected: {e}")
            raise

        form = self._state.form
        preset = PromptPreset(
            id=self._new_id(),
            name=name,
            base_prompt=form.base_prompt,
            parameter=form.parameter,
            variations=form.variations,
            temperature=form.temperature,
            seed=form.seed,
        )
        self.dispatch(PresetSaved(preset))
        logger.info(f"Saved preset '{preset.name}'")
        return preset

    def delete_preset(self, preset_id: str) -> bool:
        """Delete a preset by id.  Returns False if it did not exist."""
        previous = self._state.presets
        return self.dispatch(PresetDeleted(preset_id)).presets is not previous

    def delete_prompt(self, entry_id: str) -> bool:
        """Delete a prompt-history entry by id.  Returns False if it did not exist."""
        previous = self._state.prompt_history
        return self.dispatch(PromptHistoryDeleted(entry_id)).prompt_history is not previous

    def search_prompt_history(self, search: str | None = None) -> tuple[PromptHistoryEntry, ...]:
        """Filter prompt history by a case-insensitive base-prompt substring."""
        return filter_prompt_history(self._state.prompt_history, search)
