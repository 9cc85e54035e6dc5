"""Extractor interface for pluggable per-source content extraction."""

from abc import ABC, abstractmethod

from app.enrichment.types import ExtractionResult, SourceKind


class ExtractionError(RuntimeError):
    """Raised when a source cannot be fetched or its payload is unusable."""


class ContentExtractor(ABC):
    """Abstract extractor; fallback policy belongs to the caller."""

    @property
    @abstractmethod
    def source_type(self) -> SourceKind:
        """The source kind this extractor handles."""

    @abstractmethod
    def extract(self, url: str) -> ExtractionResult:
        """Fetch and normalize content for a URL."""

    def bare_result(self) -> ExtractionResult:
        return ExtractionResult(source_type=self.source_type)
