"""
Triage Error Types

Errors that must reach the caller. Backend-unavailable and
malformed-output conditions are recovered locally and never
raised past the classifier.
"""

from typing import Optional
from uuid import UUID


class TriageError(Exception):
    """Base exception for triage engine errors."""


class ConversationNotFoundError(TriageError):
    """No conversation record exists for the given id."""

    def __init__(self, conversation_id: UUID) -> None:
        super().__init__(f"Conversation {conversation_id} not found")
        self.conversation_id = conversation_id


class TriagePersistenceError(TriageError):
    """
    The atomic urgency + completion write failed.

    Triage is not considered complete when this is raised.
    """

    def __init__(
        self,
        conversation_id: UUID,
        original_error: Optional[Exception] = None,
    ) -> None:
        super().__init__(f"Failed to persist triage result for conversation {conversation_id}")
        self.conversation_id = conversation_id
        self.original_error = original_error


class StaffLookupError(TriageError):
    """The staff directory could not be queried; no notifications were sent."""

    def __init__(self, roles: list[str], original_error: Optional[Exception] = None) -> None:
        super().__init__(f"Staff lookup failed for roles {roles}")
        self.roles = roles
        self.original_error = original_error
