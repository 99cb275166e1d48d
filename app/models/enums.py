"""Enum types for candidate pipeline state."""

from enum import Enum


class CandidateStatus(str, Enum):
    """Hiring status of a candidate."""
    new = "new"
    screening = "screening"
    interviewing = "interviewing"
    offer = "offer"
    hired = "hired"
    rejected = "rejected"
    withdrawn = "withdrawn"


class InterviewStage(str, Enum):
    """Furthest interview stage reached."""
    not_started = "not_started"
    phone_screen = "phone_screen"
    technical = "technical"
    behavioral = "behavioral"
    final = "final"
    completed = "completed"
