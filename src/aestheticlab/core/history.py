"""Copy-on-write operations over the lab's ordered collections.

Generations, presets and prompt-history entries are held as tuples ordered
newest first.  Every operation here is pure: it returns a new tuple and
leaves untouched records (and, when nothing changes, the whole tuple) with
their original identity, so callers can detect changes with ``is``.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TypeVar

from .models import MAX_RATING, GenerationResult, PromptHistoryEntry

logger = logging.getLogger(__name__)

T = TypeVar("T")


def prepend(records: tuple[T, ...], record: T) -> tuple[T, ...]:
    """Insert *record* at the head of *records*."""
    return (record, *records)


def find_by_id(records: tuple[T, ...], record_id: str) -> T | None:
    """Return the record whose ``id`` equals *record_id*, if any."""
    return next((record for record in records if record.id == record_id), None)


def remove_by_id(records: tuple[T, ...], record_id: str) -> tuple[T, ...]:
    """Remove the record with *record_id*, keeping the order of the rest.

    Returns *records* itself when no record matches.
    """
    remaining = tuple(record for record in records if record.id != record_id)
    if len(remaining) == len(records):
        logger.debug(f"No record with id {record_id} to remove")
        return records
    return remaining


def rate_image(
    generations: tuple[GenerationResult, ...], image_id: str, rating: int
) -> tuple[GenerationResult, ...]:
    """Apply a rating toggle to the image with *image_id*.

    Rating an image with its current value resets it to 0 (unrated);
    any other value overwrites the current rating.  Only the generation that
    holds the image and the image itself are replaced.

    Args:
        generations: History, newest first.
        image_id: Identifier of the image to rate.
        rating: Requested rating, 1-5.

    Returns:
        The updated history, or *generations* unchanged if no image matches.

    Raises:
        ValueError: If *rating* is outside 1-5.
    """
    if not 1 <= rating <= MAX_RATING:
        raise ValueError(f"Rating must be 1-{MAX_RATING}, got {rating}")

    for gen_index, generation in enumerate(generations):
        for img_index, image in enumerate(generation.images):
            if image.id != image_id:
                continue

            new_rating = 0 if image.rating == rating else rating
            images = list(generation.images)
            images[img_index] = replace(image, rating=new_rating)

            updated = list(generations)
            updated[gen_index] = replace(generation, images=tuple(images))
            logger.debug(f"Rated image {image_id}: {image.rating} -> {new_rating}")
            return tuple(updated)

    logger.debug(f"No image with id {image_id} to rate")
    return generations


def filter_prompt_history(
    entries: tuple[PromptHistoryEntry, ...], search: str | None
) -> tuple[PromptHistoryEntry, ...]:
    """Keep entries whose base prompt contains *search*, ignoring case.

    An empty or missing search term keeps every entry.
    """
    if not search:
        return entries
    needle = search.lower()
    return tuple(entry for entry in entries if needle in entry.base_prompt.lower())


def resolve_displayed_generation(
    generations: tuple[GenerationResult, ...],
    selected_id: str | None,
    error: str | None = None,
) -> GenerationResult | None:
    """Resolve which generation the results view shows.

    An active error hides every generation.  Otherwise an explicit selection
    wins, and without one the newest generation is shown.
    """
    if error:
        return None
    target_id = selected_id if selected_id is not None else (
        generations[0].id if generations else None
    )
    if target_id is None:
        return None
    return find_by_id(generations, target_id)
