"""Test fixtures for the transcript mockup."""
