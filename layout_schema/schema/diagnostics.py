"""
Recovery diagnostics.

Compilation never fails on bad input. Each time the compiler degrades
(skips a declaration, breaks a cycle, falls back) it logs and records a
Diagnostic so callers can report what happened.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class DiagnosticKind(str, Enum):
    EXTRACTION_FAILURE = "extraction_failure"
    NO_MAIN_DECLARATION = "no_main_declaration"
    UNRESOLVED_FRAGMENT = "unresolved_fragment"
    REFERENCE_CYCLE = "reference_cycle"
    DEPTH_EXCEEDED = "depth_exceeded"
    EMPTY_SCHEMA = "empty_schema"
    INTERNAL_ERROR = "internal_error"


@dataclass
class Diagnostic:
    """
    A single recovery event.

    Attributes:
        kind: What went wrong
        message: Human-readable description
        name: Declaration involved, if any
    """

    kind: DiagnosticKind
    message: str
    name: Optional[str] = None


@dataclass
class Diagnostics:
    """Collector passed through one compilation."""

    items: List[Diagnostic] = field(default_factory=list)

    def add(self, kind: DiagnosticKind, message: str, name: Optional[str] = None) -> None:
        self.items.append(Diagnostic(kind=kind, message=message, name=name))

    def kinds(self) -> List[DiagnosticKind]:
        return [item.kind for item in self.items]

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self):
        return iter(self.items)


class SchemaCompilationError(ValueError):
    """Internal invariant violation; converted to the fallback document."""
