"""Prompt expansion for variation batches.

A submission pairs one base prompt with one aesthetic parameter and several
variation labels.  Expansion produces one fully-qualified prompt per label::

    "{base_prompt}, {parameter}: {variation}"

Example
-------
::

    expand_prompts("a cat", AestheticParameter.STYLE, ["Cyberpunk", "Ukiyo-e"])
    # ["a cat, Style: Cyberpunk", "a cat, Style: Ukiyo-e"]

Order is preserved and duplicate labels are kept, so the image returned for
prompt ``i`` always belongs to variation ``i``.
"""

from __future__ import annotations

from collections.abc import Sequence

from .catalog import AestheticParameter


def expand_prompt(base_prompt: str, parameter: AestheticParameter, variation: str) -> str:
    """Build the prompt for a single variation.

    Args:
        base_prompt: The subject description entered by the user.
        parameter: The aesthetic parameter being varied.
        variation: One label from the parameter's catalog.

    Returns:
        The expanded prompt string.
    """
    return f"{base_prompt}, {AestheticParameter(parameter).value}: {variation}"


def expand_prompts(
    base_prompt: str,
    parameter: AestheticParameter,
    variations: Sequence[str],
) -> list[str]:
    """Expand *base_prompt* once per variation, in caller order.

    An empty *variations* sequence yields an empty list; submission
    validation rejects that case before anything is dispatched.
    """
    return [expand_prompt(base_prompt, parameter, variation) for variation in variations]
