"""Exceptions raised by kb-importer for fatal, non-data failures."""

from __future__ import annotations


class KbImporterError(Exception):
    """Base class for kb-importer errors."""


class ReferenceSequenceError(KbImporterError):
    """Raised when the reference genome cannot provide a requested base."""


class CdnaAnalyzerError(KbImporterError):
    """Raised when transcript-based inference cannot complete a batch."""


class ConfigError(KbImporterError):
    """Raised when a run configuration cannot be loaded."""


class CivicApiError(KbImporterError):
    """Raised when the CIViC GraphQL API answers with an error payload."""
