"""Base class for output storage backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from kbimporter.models import KnowledgebaseOutputs


class OutputStorage(ABC):
    """Stores a run's outputs in a queryable form."""

    @abstractmethod
    def persist(self, outputs: Sequence[KnowledgebaseOutputs]) -> None:
        """Persist outputs in backend-specific format."""
