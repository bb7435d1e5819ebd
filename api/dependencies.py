"""Dependency injection providers for the FastAPI application.

This module defines dependencies that can be injected into route handlers,
providing access to shared resources like the ConversationStore.
"""

import os
from typing import Annotated

from fastapi import Depends

from transcript.slots import FileSlotStore, MemorySlotStore, SlotStore
from transcript.store import ConversationStore


DEFAULT_DATA_DIR = ".transcript_data"

# Global state
# There is exactly one conversation per running process
_conversation_store: ConversationStore | None = None


def get_conversation_store() -> ConversationStore:
    """Get the shared ConversationStore instance.

    This function is a FastAPI dependency. When you add it to a route handler's
    parameters, FastAPI will automatically call this function and inject the result.

    Returns:
        The shared ConversationStore instance.

    Raises:
        RuntimeError: If the store hasn't been initialized yet.

    Example:
        @router.get("/some-endpoint")
        async def my_handler(store: ConversationStoreDep):
            return store.state.get_snapshot()
    """
    if _conversation_store is None:
        raise RuntimeError(
            "ConversationStore not initialized. Call initialize_conversation_store() first."
        )

    return _conversation_store


def create_slot_store() -> SlotStore:
    """Create the slot store selected by the environment.

    Reads TRANSCRIPT_STORAGE ("file" or "memory", default "file") and
    TRANSCRIPT_DATA_DIR (directory for file slots, default ".transcript_data").

    Returns:
        The configured slot store.

    Raises:
        ValueError: If TRANSCRIPT_STORAGE names an unknown backend.
    """
    backend = os.environ.get("TRANSCRIPT_STORAGE", "file").strip().lower()
    if backend == "memory":
        return MemorySlotStore()
    if backend == "file":
        return FileSlotStore(os.environ.get("TRANSCRIPT_DATA_DIR", DEFAULT_DATA_DIR))
    raise ValueError(f"Unknown TRANSCRIPT_STORAGE backend: '{backend}'")


def initialize_conversation_store(slots: SlotStore | None = None) -> ConversationStore:
    """Initialize the shared ConversationStore instance.

    This should be called once when the FastAPI app starts up. Loads the
    conversation and preferences from the slots, falling back to defaults.

    Args:
        slots: Slot store to use (defaults to the one configured by the environment).

    Returns:
        The newly created ConversationStore instance.
    """
    global _conversation_store

    _conversation_store = ConversationStore.load(slots or create_slot_store())
    return _conversation_store


def shutdown_conversation_store() -> None:
    """Flush and drop the shared ConversationStore.

    This should be called when the FastAPI app shuts down.
    """
    global _conversation_store

    if _conversation_store is not None:
        _conversation_store.save()

    _conversation_store = None


# Type alias for dependency injection
# This makes the type annotation cleaner in route handlers
ConversationStoreDep = Annotated[ConversationStore, Depends(get_conversation_store)]
