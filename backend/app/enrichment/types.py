"""Typed enrichment outputs independent of persistence."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal


class SourceKind(str, Enum):
    """Closed set of link sources; values are what gets persisted."""

    CODE_HOST = "github"
    SOCIAL_POST = "x"
    WEBPAGE = "webpage"


@dataclass(slots=True, frozen=True)
class CodeHostRef:
    """Repository coordinates parsed from a code-host URL."""

    owner: str
    repo: str
    ref_kind: Literal["blob", "tree", "root"] = "root"
    ref: str | None = None
    path: str | None = None


@dataclass(slots=True)
class ExtractionResult:
    """Normalized content for one URL. Only ``source_type`` is guaranteed."""

    source_type: SourceKind
    title: str | None = None
    description: str | None = None
    image_url: str | None = None
    raw_content: str | None = None
    extracted_urls: list[str] = field(default_factory=list)


@dataclass(slots=True)
class SummaryResult:
    """Model summary with taxonomy-filtered tags."""

    summary: str
    tags: list[str] = field(default_factory=list)
