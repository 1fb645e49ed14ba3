"""Built-in example configurations.

Examples load into the form exactly like saved presets.  They are static and
never written to the durable store; their ids are stable slugs so clients can
refer to them.
"""

from __future__ import annotations

from .catalog import AestheticParameter
from .models import PromptPreset

EXAMPLE_PRESETS: tuple[PromptPreset, ...] = (
    PromptPreset(
        id="cyberpunk-city-lighting",
        name="Cyberpunk City Lighting",
        base_prompt=(
            "A rain-slicked neon street in a futuristic city, "
            "crowded with people holding glowing umbrellas"
        ),
        parameter=AestheticParameter.LIGHTING,
        variations=("Volumetric lighting", "Cinematic lighting", "Rim lighting", "Neon glow"),
        temperature=0.6,
        seed=2049,
    ),
    PromptPreset(
        id="ukiyo-e-cherry-blossom",
        name="Ukiyo-e Cherry Blossom",
        base_prompt=(
            "A solitary cherry blossom tree on a misty mountain overlooking a tranquil village"
        ),
        parameter=AestheticParameter.STYLE,
        variations=("Ukiyo-e", "Impressionism", "Minimalist"),
        temperature=0.4,
    ),
    PromptPreset(
        id="surreal-underwater-scene",
        name="Surreal Underwater Scene",
        base_prompt="An octopus reading a glowing book in a vast, ancient underwater library",
        parameter=AestheticParameter.COMPOSITION,
        variations=("Symmetrical", "Close-up", "Wide shot", "Dutch angle"),
        temperature=0.8,
        seed=101,
    ),
    PromptPreset(
        id="artistic-robot-butler",
        name="Artistic Robot Butler",
        base_prompt="Portrait of an elegant robot butler serving tea",
        parameter=AestheticParameter.STYLE,
        variations=("Art Deco", "Steampunk", "Surrealism", "Biopunk"),
        temperature=0.7,
    ),
    PromptPreset(
        id="dramatic-coffee-photo",
        name="Dramatic Coffee Photo",
        base_prompt="A perfectly crafted cup of steaming coffee on a rustic wooden table",
        parameter=AestheticParameter.LIGHTING,
        variations=(
            "Soft, diffused lighting",
            "Hard, dramatic lighting",
            "Golden hour",
            "Silhouette lighting",
        ),
        temperature=0.5,
        seed=42,
    ),
)


def find_example(example_id: str) -> PromptPreset | None:
    """Return the built-in example with *example_id*, if any."""
    return next((example for example in EXAMPLE_PRESETS if example.id == example_id), None)
