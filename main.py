"""Main entry point for the chat transcript mockup FastAPI application.

This module creates and configures the FastAPI app instance that serves the REST API
for authoring a mocked chat conversation and previewing it as a phone screen.

To run the development server:
    uv run uvicorn main:app --reload

To run in production:
    uv run uvicorn main:app --host 0.0.0.0 --port 8000
"""

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from pydantic import ValidationError

from api.dependencies import initialize_conversation_store, shutdown_conversation_store
from api.exceptions import (
    CommandRejectedError,
    ParticipantNotFoundError,
    command_rejected_handler,
    document_format_handler,
    generic_exception_handler,
    participant_not_found_handler,
    validation_exception_handler,
    value_error_handler,
)
from api.routes import conversation as conversation_routes
from api.routes import messages as messages_routes
from api.routes import participants as participants_routes
from api.routes import preview as preview_routes
from api.routes import settings as settings_routes
from transcript.persistence import DocumentFormatError

# Load TRANSCRIPT_* settings from a .env file before the store is created
load_dotenv()

logging.basicConfig(
    level=os.environ.get("TRANSCRIPT_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan events.

    Loads the conversation from the local slots at startup and flushes it
    back at shutdown.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control back to FastAPI to handle requests.
    """
    print("🚀 Starting transcript mockup - Loading conversation...")
    store = initialize_conversation_store()
    print(f"✅ Conversation loaded: {store.state.summary}")

    yield  # App runs and handles requests here

    print("🛑 Shutting down transcript mockup - Saving conversation...")
    shutdown_conversation_store()
    print("✅ Shutdown complete")


# Create the FastAPI application instance
app = FastAPI(
    title="Chat Transcript Mockup",
    description="API for authoring mocked chat conversations and previewing them as a phone screen",
    version="0.1.0",
    lifespan=lifespan,
)

# Register exception handlers
# Order matters: specific exceptions before general ones
app.add_exception_handler(ParticipantNotFoundError, participant_not_found_handler)
app.add_exception_handler(CommandRejectedError, command_rejected_handler)
app.add_exception_handler(DocumentFormatError, document_format_handler)
app.add_exception_handler(ValidationError, validation_exception_handler)
app.add_exception_handler(ValueError, value_error_handler)
app.add_exception_handler(Exception, generic_exception_handler)

# Register route modules
app.include_router(conversation_routes.router)
app.include_router(participants_routes.router)
app.include_router(messages_routes.router)
app.include_router(settings_routes.router)
app.include_router(preview_routes.router)


@app.get("/")
async def root():
    """Root endpoint - returns a welcome message.

    Returns:
        A dictionary with a welcome message.
    """
    return {
        "message": "Welcome to the Chat Transcript Mockup API",
        "version": "0.1.0",
        "docs_url": "/docs",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring.

    Returns:
        A dictionary indicating the service is healthy.
    """
    return {"status": "healthy"}
