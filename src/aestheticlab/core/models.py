"""Data records for generations, presets and prompt history.

All records are frozen dataclasses.  Collections of records are tuples, so a
mutation always produces new objects and untouched records keep their
identity.  Each record converts to and from a JSON-compatible dict for the
durable store.

Records
-------
GeneratedImage
    One image produced for one variation of a batch.
GenerationResult
    One completed batch.  ``images`` always has the same length as
    ``variations``; only the nested ``rating`` fields ever change.
PromptPreset
    A named, reusable form configuration.  Never holds images.
PromptHistoryEntry
    A submitted form configuration, recorded before the batch resolves.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .catalog import AestheticParameter

MIN_RATING = 0
MAX_RATING = 5


def _optional_int(value) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool):
        raise TypeError(f"Expected an integer seed, got {value!r}")
    return int(value)


def _variations(value) -> tuple[str, ...]:
    if not isinstance(value, (list, tuple)):
        raise TypeError(f"Expected a list of variations, got {type(value).__name__}")
    return tuple(str(v) for v in value)


@dataclass(frozen=True)
class GeneratedImage:
    """A single generated image.

    Attributes:
        id: Unique image identifier.
        src: Displayable image reference (a ``data:`` URI).
        prompt: The exact expanded prompt that produced the image.
        variation: The variation label that was applied.
        rating: 0 for unrated, otherwise 1-5.
    """

    id: str
    src: str
    prompt: str
    variation: str
    rating: int = 0

    def __post_init__(self) -> None:
        if not MIN_RATING <= self.rating <= MAX_RATING:
            raise ValueError(
                f"Rating must be {MIN_RATING}-{MAX_RATING}, got {self.rating}"
            )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "src": self.src,
            "prompt": self.prompt,
            "variation": self.variation,
            "rating": self.rating,
        }

    @classmethod
    def from_dict(cls, data: dict) -> GeneratedImage:
        # Older records may omit the rating or store null for unrated images.
        return cls(
            id=str(data["id"]),
            src=str(data["src"]),
            prompt=str(data["prompt"]),
            variation=str(data["variation"]),
            rating=int(data.get("rating") or 0),
        )


@dataclass(frozen=True)
class GenerationResult:
    """One completed batch request and its images."""

    id: str
    base_prompt: str
    parameter: AestheticParameter
    variations: tuple[str, ...]
    images: tuple[GeneratedImage, ...]
    timestamp: str
    temperature: float
    seed: int | None = None

    def __post_init__(self) -> None:
        if len(self.images) != len(self.variations):
            raise ValueError(
                f"Generation {self.id} has {len(self.images)} images "
                f"for {len(self.variations)} variations"
            )

    @property
    def rated_images(self) -> tuple[GeneratedImage, ...]:
        """Images with a positive rating, in display order."""
        return tuple(image for image in self.images if image.rating > 0)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "base_prompt": self.base_prompt,
            "parameter": self.parameter.value,
            "variations": list(self.variations),
            "images": [image.to_dict() for image in self.images],
            "timestamp": self.timestamp,
            "temperature": self.temperature,
            "seed": self.seed,
        }

    @classmethod
    def from_dict(cls, data: dict) -> GenerationResult:
        return cls(
            id=str(data["id"]),
            base_prompt=str(data["base_prompt"]),
            parameter=AestheticParameter(data["parameter"]),
            variations=_variations(data["variations"]),
            images=tuple(GeneratedImage.from_dict(image) for image in data["images"]),
            timestamp=str(data["timestamp"]),
            temperature=float(data["temperature"]),
            seed=_optional_int(data.get("seed")),
        )


@dataclass(frozen=True)
class PromptPreset:
    """A named, reusable configuration."""

    id: str
    name: str
    base_prompt: str
    parameter: AestheticParameter
    variations: tuple[str, ...] = field(default_factory=tuple)
    temperature: float = 0.5
    seed: int | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "base_prompt": self.base_prompt,
            "parameter": self.parameter.value,
            "variations": list(self.variations),
            "temperature": self.temperature,
            "seed": self.seed,
        }

    @classmethod
    def from_dict(cls, data: dict) -> PromptPreset:
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            base_prompt=str(data["base_prompt"]),
            parameter=AestheticParameter(data["parameter"]),
            variations=_variations(data["variations"]),
            temperature=float(data["temperature"]),
            seed=_optional_int(data.get("seed")),
        )


@dataclass(frozen=True)
class PromptHistoryEntry:
    """A record of one generation attempt, kept whatever its outcome."""

    id: str
    base_prompt: str
    parameter: AestheticParameter
    variations: tuple[str, ...]
    temperature: float
    timestamp: str
    seed: int | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "base_prompt": self.base_prompt,
            "parameter": self.parameter.value,
            "variations": list(self.variations),
            "temperature": self.temperature,
            "seed": self.seed,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict) -> PromptHistoryEntry:
        return cls(
            id=str(data["id"]),
            base_prompt=str(data["base_prompt"]),
            parameter=AestheticParameter(data["parameter"]),
            variations=_variations(data["variations"]),
            temperature=float(data["temperature"]),
            timestamp=str(data["timestamp"]),
            seed=_optional_int(data.get("seed")),
        )
