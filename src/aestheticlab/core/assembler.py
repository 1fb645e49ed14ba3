"""Assemble provider output into a generation record."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import datetime

from .catalog import AestheticParameter
from .generation_client import ImagePayload
from .models import GeneratedImage, GenerationResult
from .prompt_expander import expand_prompt

logger = logging.getLogger(__name__)


class AssemblyError(ValueError):
    """Raised when payloads cannot be matched to the requested variations."""

    pass


def assemble_generation(
    base_prompt: str,
    parameter: AestheticParameter,
    variations: Sequence[str],
    payloads: Sequence[ImagePayload],
    temperature: float,
    seed: int | None,
    now: datetime,
    new_id: Callable[[], str],
) -> GenerationResult:
    """Build an immutable :class:`GenerationResult` from a completed batch.

    ``variations[i]`` is zipped with ``payloads[i]``.  Every image gets a
    fresh id and starts unrated; the record gets its own id and the
    timestamp of *now*.

    Args:
        base_prompt: Subject description the batch was expanded from.
        parameter: The varied aesthetic parameter.
        variations: Requested variation labels, in request order.
        payloads: Provider payloads, positionally matching *variations*.
        temperature: Temperature recorded with the request.
        seed: Optional seed recorded with the request.
        now: Completion time.
        new_id: Identifier factory.

    Returns:
        The assembled generation record.

    Raises:
        AssemblyError: If the payload count differs from the variation count.
    """
    if len(payloads) != len(variations):
        raise AssemblyError(
            f"Expected {len(variations)} images, received {len(payloads)}"
        )

    parameter = AestheticParameter(parameter)
    images = tuple(
        GeneratedImage(
            id=new_id(),
            src=payload.to_data_uri(),
            prompt=expand_prompt(base_prompt, parameter, variation),
            variation=variation,
        )
        for variation, payload in zip(variations, payloads)
    )

    result = GenerationResult(
        id=new_id(),
        base_prompt=base_prompt,
        parameter=parameter,
        variations=tuple(variations),
        images=images,
        timestamp=now.isoformat(timespec="seconds"),
        temperature=temperature,
        seed=seed,
    )
    logger.debug(f"Assembled generation {result.id} with {len(images)} images")
    return result
