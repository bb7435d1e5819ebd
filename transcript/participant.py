"""Participant model."""

from typing import Optional

from pydantic import Field, field_validator

from transcript.base_record import DocumentModel


def avatar_initial(name: Optional[str]) -> str:
    """Return the badge letter shown when no avatar image is available.

    Args:
        name: Display name to take the initial from.

    Returns:
        Upper-cased first character of the name, or "?" if there is none.
    """
    if not name or not name.strip():
        return "?"
    return name.strip()[0].upper()


class Participant(DocumentModel):
    """A person taking part in the mocked conversation.

    Args:
        id: Opaque unique identifier, assigned by the store and never reused.
        name: Non-empty display name.
        avatar: Image reference (URL or data URL), or None for a letter badge.
    """

    id: str = Field(description="Opaque unique identifier")
    name: str = Field(description="Display name")
    avatar: Optional[str] = Field(default=None, description="Image reference")

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        """Validate the display name is non-empty.

        Args:
            value: Name to validate.

        Returns:
            The validated name.

        Raises:
            ValueError: If the name is empty or whitespace.
        """
        if not value.strip():
            raise ValueError("Participant name cannot be empty")
        return value

    @field_validator("avatar")
    @classmethod
    def normalize_avatar(cls, value: Optional[str]) -> Optional[str]:
        """Treat a blank image reference as no avatar."""
        if value is not None and not value.strip():
            return None
        return value

    @property
    def initial(self) -> str:
        """Letter shown in the placeholder badge."""
        return avatar_initial(self.name)
