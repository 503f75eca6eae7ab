"""Publisher interface for kb-importer outputs."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from kbimporter.models import KnowledgebaseOutputs


class Publisher(ABC):
    """Publishes knowledge-base outputs into consumer-facing artifacts."""

    @abstractmethod
    def publish(self, outputs: Sequence[KnowledgebaseOutputs]) -> None:
        """Publish outputs into output targets."""
