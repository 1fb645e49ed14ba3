"""Validation utilities for Aesthetic Lab inputs."""

import logging

from aestheticlab.core.catalog import variations_for
from aestheticlab.core.models import MAX_RATING

from .models import FormState

logger = logging.getLogger(__name__)


class ValidationError(Exception):
    """User-friendly validation error.

    This exception is raised when user input fails validation.
    The message is intended to be displayed directly to the user.
    """

    pass


def validate_submission(form: FormState) -> None:
    """Check that the form can be dispatched as a batch.

    Args:
        form: Current form values

    Raises:
        ValidationError: If the base prompt is empty, no variation is
            selected, or a selection is not valid for the parameter
    """
    if not form.has_prompt():
        raise ValidationError("Please enter a base prompt")

    if not form.variations:
        raise ValidationError("Please select at least one variation")

    valid = variations_for(form.parameter)
    invalid = [label for label in form.variations if label not in valid]
    if invalid:
        raise ValidationError(
            f"Not valid for {form.parameter.value}: {', '.join(invalid)}"
        )


def validate_preset_name(name: str | None) -> str:
    """Validate a preset name and return it stripped.

    Raises:
        ValidationError: If the name is missing or whitespace only
    """
    if not name or not name.strip():
        raise ValidationError("Please enter a name for the preset")
    return name.strip()


def validate_rating(rating: int) -> None:
    """Check that *rating* is one of the five rank positions.

    Raises:
        ValidationError: If the rating is outside 1-5
    """
    if isinstance(rating, bool) or not 1 <= rating <= MAX_RATING:
        raise ValidationError(f"Rating must be 1-{MAX_RATING}, got {rating}")
