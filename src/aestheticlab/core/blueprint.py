"""Style blueprint derivation.

A blueprint summarises which variations the user liked within one
generation.  It is derived on every read from the current ratings and is
never stored.

Format::

    --- Style Blueprint ---

    Base Subject: a cat
    Parameter Tested: Style
    Effective Variations: Ukiyo-e

    --- Parameters ---
    Temperature: 0.5
    Seed: 42
"""

from __future__ import annotations

from .models import GenerationResult


def _format_number(value: float) -> str:
    # Integral values print bare ("1"), others in shortest round-trip form
    value = float(value)
    return f"{value:g}" if value.is_integer() else repr(value)


def effective_variations(generation: GenerationResult) -> list[str]:
    """Distinct variation labels of rated images, in order of first appearance."""
    return list(dict.fromkeys(image.variation for image in generation.rated_images))


def derive_blueprint(generation: GenerationResult | None) -> str | None:
    """Render the blueprint for *generation*.

    Returns:
        The blueprint text, or ``None`` when there is no generation or no
        image in it has a positive rating.
    """
    if generation is None:
        return None

    variations = effective_variations(generation)
    if not variations:
        return None

    lines = [
        "--- Style Blueprint ---",
        "",
        f"Base Subject: {generation.base_prompt}",
        f"Parameter Tested: {generation.parameter.value}",
        f"Effective Variations: {', '.join(variations)}",
        "",
        "--- Parameters ---",
        f"Temperature: {_format_number(generation.temperature)}",
    ]
    if generation.seed is not None:
        lines.append(f"Seed: {generation.seed}")

    return "\n".join(lines) + "\n"
