"""Interactive session layer for the Aesthetic Lab.

- models: Form and session state records, plus the events that change them
- state: The pure reducer and initial state loading
- validation: User-facing input checks
- session: LabSession, which applies events, runs batches and persists
"""

from .models import FormState, LabState
from .session import LabSession
from .validation import ValidationError

__all__ = [
    "FormState",
    "LabSession",
    "LabState",
    "ValidationError",
]
