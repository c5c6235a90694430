"""Shared dependencies for API routes."""

from services.completion_client import CompletionClient, get_client


def get_completion_client() -> CompletionClient | None:
    return get_client()
