"""Knowledge-base importers."""

from .base import Knowledgebase
from .civic import CivicKnowledgebase, CorrectionRule

__all__ = [
    "Knowledgebase",
    "CivicKnowledgebase",
    "CorrectionRule",
]
