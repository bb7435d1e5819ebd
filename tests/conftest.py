"""Pytest configuration and shared fixtures."""

# Load environment variables from .env file at test startup
# This ensures TRANSCRIPT_* settings are available before fixtures are created
from dotenv import load_dotenv
load_dotenv()

# Import all fixtures from the fixture modules
pytest_plugins = [
    "tests.fixtures.conversation",
    "tests.fixtures.api",
]
