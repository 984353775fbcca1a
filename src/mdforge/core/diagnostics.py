"""Non-fatal structural warnings collected while a document compiles"""

import logging
from dataclasses import dataclass, field
from enum import Enum


logger = logging.getLogger(__name__)


class DiagnosticKind(str, Enum):
    unmatched_delimiter   = "unmatched_delimiter"
    unresolved_footnote   = "unresolved_footnote"
    unreferenced_footnote = "unreferenced_footnote"
    unknown_language      = "unknown_language"
    highlighter_error     = "highlighter_error"
    unknown_author        = "unknown_author"
    malformed_url         = "malformed_url"


@dataclass(frozen=True)
class Diagnostic:
    kind:    DiagnosticKind
    stage:   str
    message: str

    def __str__(self) -> str:
        return f"[{self.stage}] {self.message}"


@dataclass
class Diagnostics:
    """Per-document warning sink; passes record here instead of raising."""
    items: list[Diagnostic] = field(default_factory=list)

    def warn(self, kind: DiagnosticKind, stage: str, message: str) -> None:
        self.items.append(Diagnostic(kind, stage, message))
        logger.warning("%s: %s", stage, message)

    def of_kind(self, kind: DiagnosticKind) -> list[Diagnostic]:
        return [d for d in self.items if d.kind == kind]

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self):
        return iter(self.items)
