"""Base class for records stored in the conversation document."""

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class DocumentModel(BaseModel):
    """Base for records that travel in the persisted conversation document.

    Attributes are snake_case in Python and camelCase in the document
    (``sender_id`` is stored as ``senderId``). Both spellings are accepted
    when validating, so records can be built from keyword arguments or
    loaded straight from an imported file.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self) -> dict[str, Any]:
        """Convert this record to its JSON-ready document form.

        Returns:
            Dictionary with camelCase keys and ISO-8601 datetimes.
        """
        return self.model_dump(mode="json", by_alias=True)
