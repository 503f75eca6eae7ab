"""kb-importer output publishers."""

from .base import Publisher
from .json_output import JsonOutputPublisher
from .tsv import TsvOutputPublisher

__all__ = [
    "Publisher",
    "JsonOutputPublisher",
    "TsvOutputPublisher",
]
