"""Core functionality for variation batches.

This module provides the domain components of the Aesthetic Lab:

- **catalog**: Aesthetic parameters and their variation labels
- **models**: Generation, preset and prompt-history records
- **prompt_expander**: One prompt per selected variation
- **generation_client**: Concurrent, all-or-nothing batch dispatch
- **assembler**: Provider payloads to generation records
- **history**: Copy-on-write collection operations and rating toggles
- **blueprint**: Style blueprint derived from ratings
- **storage**: Durable key-value store for the three collections
- **config**: Configuration management using Pydantic Settings

Architecture Overview
---------------------
The core is free of web and session concerns:

1. **Pure Layer** (catalog, prompt_expander, assembler, history, blueprint):
   - Deterministic functions over immutable records
   - Identity and time are passed in, never read from globals

2. **Boundary Layer** (generation_client, storage):
   - The external image provider behind a one-prompt protocol
   - The durable store behind a get/set protocol

Usage Example
-------------
::

    from aestheticlab.core import AestheticParameter, expand_prompts

    expand_prompts("a cat", AestheticParameter.STYLE, ["Cyberpunk", "Ukiyo-e"])
    # ["a cat, Style: Cyberpunk", "a cat, Style: Ukiyo-e"]
"""

from aestheticlab.core.assembler import AssemblyError, assemble_generation
from aestheticlab.core.blueprint import derive_blueprint
from aestheticlab.core.catalog import AESTHETIC_OPTIONS, AestheticParameter
from aestheticlab.core.config import AestheticLabConfig, config
from aestheticlab.core.generation_client import (
    GeminiImageProvider,
    GenerationClient,
    GenerationFailure,
    ImagePayload,
)
from aestheticlab.core.history import rate_image, resolve_displayed_generation
from aestheticlab.core.models import (
    GeneratedImage,
    GenerationResult,
    PromptHistoryEntry,
    PromptPreset,
)
from aestheticlab.core.prompt_expander import expand_prompts

__all__ = [
    "AESTHETIC_OPTIONS",
    "AestheticLabConfig",
    "AestheticParameter",
    "AssemblyError",
    "GeminiImageProvider",
    "GeneratedImage",
    "GenerationClient",
    "GenerationFailure",
    "GenerationResult",
    "ImagePayload",
    "PromptHistoryEntry",
    "PromptPreset",
    "assemble_generation",
    "config",
    "derive_blueprint",
    "expand_prompts",
    "rate_image",
    "resolve_displayed_generation",
]
