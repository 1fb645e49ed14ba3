"""Pydantic request models for the Aesthetic Lab API.

FastAPI uses these models for request validation, serialisation, and
OpenAPI documentation generation.

Models
------
FormUpdateRequest
    Payload for ``PUT /api/form``: partial update of the generation form.
VariationToggleRequest
    Payload for ``POST /api/form/variations/toggle``.
LoadConfigurationRequest
    Payload for ``POST /api/form/load``: copy a preset, prompt-history entry
    or built-in example into the form.
RateImageRequest
    Payload for ``POST /api/images/rate``.
PresetCreateRequest
    Payload for ``POST /api/presets``.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from aestheticlab.core.catalog import AestheticParameter


class FormUpdateRequest(BaseModel):
    """Request body for the ``PUT /api/form`` endpoint.

    Only the fields present in the request body are applied.  Sending
    ``"seed": null`` explicitly clears the seed.

    Attributes:
        base_prompt: Subject description.
        parameter: Aesthetic parameter to vary.  Switching parameter drops
            selected variations that the new parameter does not offer.
        temperature: Temperature between 0.0 and 1.0.
        seed: Optional integer seed.
    """

    base_prompt: str | None = Field(
        default=None,
        description="Subject description (e.g. 'a cat').",
    )
    parameter: AestheticParameter | None = Field(
        default=None,
        description="Aesthetic parameter: 'Style', 'Lighting' or 'Composition'.",
    )
    temperature: float | None = Field(
        default=None,
        ge=0.0,
        le=1.0,
        description="Temperature between 0.0 and 1.0.",
    )
    seed: int | None = Field(
        default=None,
        description="Optional seed.  Send null to clear.",
    )


class VariationToggleRequest(BaseModel):
    """Request body for ``POST /api/form/variations/toggle``.

    Attributes:
        variation: Variation label to select or deselect.
    """

    variation: str = Field(
        ...,
        description="Variation label from the active parameter's catalog.",
    )


class LoadConfigurationRequest(BaseModel):
    """Request body for ``POST /api/form/load``.

    Attributes:
        source: Where to look up *id*.
        id: Identifier of the preset, prompt-history entry or example.
    """

    source: Literal["preset", "prompt_history", "example"] = Field(
        ...,
        description="One of 'preset', 'prompt_history' or 'example'.",
    )
    id: str = Field(
        ...,
        description="Identifier of the configuration to load.",
    )


class RateImageRequest(BaseModel):
    """Request body for ``POST /api/images/rate``.

    Rating an image with its current rating resets it to unrated.

    Attributes:
        image_id: Identifier of the image to rate.
        rating: Rank position clicked, 1-5.
    """

    image_id: str = Field(
        ...,
        description="Identifier of the image to rate.",
    )
    rating: int = Field(
        ...,
        ge=1,
        le=5,
        description="Rating between 1 and 5.",
    )


class PresetCreateRequest(BaseModel):
    """Request body for ``POST /api/presets``.

    Attributes:
        name: Preset name.  Blank names are rejected.
    """

    name: str = Field(
        ...,
        description="Name for the preset.",
    )
