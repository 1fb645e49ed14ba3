"""Aesthetic parameter catalog.

Each aesthetic parameter owns a fixed, ordered list of variation labels.
The catalog is static data: the form offers one checkbox per label of the
active parameter, and every selection the session holds is kept a subset of
that list.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum


class AestheticParameter(str, Enum):
    """The aesthetic dimension varied across a batch."""

    STYLE = "Style"
    LIGHTING = "Lighting"
    COMPOSITION = "Composition"


AESTHETIC_OPTIONS: dict[AestheticParameter, tuple[str, ...]] = {
    AestheticParameter.STYLE: (
        "Ukiyo-e",
        "Cyberpunk",
        "Surrealism",
        "Art Deco",
        "Impressionism",
        "Steampunk",
        "Biopunk",
        "Minimalist",
        "Vaporwave",
    ),
    AestheticParameter.LIGHTING: (
        "Volumetric lighting",
        "Cinematic lighting",
        "Rim lighting",
        "Silhouette lighting",
        "Soft, diffused lighting",
        "Hard, dramatic lighting",
        "Neon glow",
        "Golden hour",
    ),
    AestheticParameter.COMPOSITION: (
        "Symmetrical",
        "Asymmetrical",
        "Rule of thirds",
        "Leading lines",
        "Patterns and repetition",
        "Close-up",
        "Wide shot",
        "Dutch angle",
    ),
}

DEFAULT_PARAMETER = AestheticParameter.STYLE


def variations_for(parameter: AestheticParameter) -> tuple[str, ...]:
    """Return the valid variation labels for *parameter*, in display order."""
    return AESTHETIC_OPTIONS[AestheticParameter(parameter)]


def prune_variations(
    selected: Iterable[str], parameter: AestheticParameter
) -> tuple[str, ...]:
    """Drop every selected label that is not valid for *parameter*.

    Surviving labels keep their selection order.

    Args:
        selected: Currently selected variation labels.
        parameter: The parameter whose catalog the selection must fit.

    Returns:
        The pruned selection.
    """
    valid = set(variations_for(parameter))
    return tuple(label for label in selected if label in valid)


def toggle_variation(
    selected: tuple[str, ...], variation: str, parameter: AestheticParameter
) -> tuple[str, ...]:
    """Add *variation* to the selection, or remove it if already selected.

    Labels outside the parameter's catalog leave the selection untouched.
    Newly selected labels are appended.
    """
    if variation in selected:
        return tuple(label for label in selected if label != variation)
    if variation not in variations_for(parameter):
        return selected
    return (*selected, variation)
