"""Local key-value persistence slots.

Each slot holds one JSON value under a name. The conversation document and
every UI preference live in separate slots so that clearing one never
touches another.
"""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)


CONVERSATION_SLOT = "conversation"
PREFERENCE_SLOTS = {
    "preview_on_right": "previewOnRight",
    "dark_mode": "darkMode",
    "show_date_dividers": "showDateDividers",
    "chat_background": "chatBackground",
}


class SlotStore(ABC):
    """Base class for local key-value stores holding raw text values."""

    @abstractmethod
    def get(self, slot: str) -> Optional[str]:
        """Return the raw text stored in a slot.

        Args:
            slot: Slot name.

        Returns:
            The stored text, or None if the slot is empty.
        """
        pass

    @abstractmethod
    def set(self, slot: str, value: str) -> None:
        """Store raw text in a slot, replacing any previous value.

        Args:
            slot: Slot name.
            value: Text to store.
        """
        pass

    @abstractmethod
    def delete(self, slot: str) -> None:
        """Empty a slot. Deleting an empty slot is a no-op.

        Args:
            slot: Slot name.
        """
        pass

    def get_json(self, slot: str) -> Any:
        """Return the decoded JSON value of a slot, or None if empty or unreadable."""
        raw = self.get(slot)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Slot '{slot}' does not hold valid JSON, ignoring it")
            return None

    def set_json(self, slot: str, value: Any) -> None:
        """Store a JSON-serializable value in a slot."""
        self.set(slot, json.dumps(value))


class MemorySlotStore(SlotStore):
    """Slot store kept in a dictionary, for tests and throwaway sessions."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self.values: dict[str, str] = dict(initial or {})

    def get(self, slot: str) -> Optional[str]:
        return self.values.get(slot)

    def set(self, slot: str, value: str) -> None:
        self.values[slot] = value

    def delete(self, slot: str) -> None:
        self.values.pop(slot, None)


class FileSlotStore(SlotStore):
    """Slot store keeping one ``<slot>.json`` file per slot in a directory.

    Args:
        directory: Directory holding the slot files (created on first write).
    """

    def __init__(self, directory: Path | str):
        self.directory = Path(directory)

    def _path(self, slot: str) -> Path:
        if not slot or "/" in slot or "\\" in slot or slot.startswith("."):
            raise ValueError(f"Invalid slot name: '{slot}'")
        return self.directory / f"{slot}.json"

    def get(self, slot: str) -> Optional[str]:
        path = self._path(slot)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (UnicodeDecodeError, OSError) as e:
            logger.warning(f"Slot file {path} could not be read, treating it as empty: {e}")
            return None

    def set(self, slot: str, value: str) -> None:
        path = self._path(slot)
        self.directory.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(value, encoding="utf-8")
        tmp_path.replace(path)

    def delete(self, slot: str) -> None:
        self._path(slot).unlink(missing_ok=True)

    def __repr__(self) -> str:
        return f"FileSlotStore(directory={str(self.directory)!r})"
