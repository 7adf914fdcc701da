"""Data access for assignments and monitored sources."""

from .assignment_store import AssignmentStore
from .source_registry import SourceRegistry, DuplicateSourceError

__all__ = [
    "AssignmentStore",
    "SourceRegistry",
    "DuplicateSourceError",
]
