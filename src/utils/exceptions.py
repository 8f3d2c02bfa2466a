"""Custom exception hierarchy for the graph sync service."""

from __future__ import annotations


class GraphSyncError(Exception):
    """Base exception for all graph sync errors."""


class PersistedStateError(GraphSyncError):
    """Persisted layout blob could not be decoded."""


class LayoutStoreError(GraphSyncError):
    """Layout store read or write failure."""


class SessionNotFoundError(GraphSyncError):
    """No session exists for the requested visual."""
