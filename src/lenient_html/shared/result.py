"""Diagnostic and metric types shared by the tokenizer, tree builder and API.

Diagnostics record the leniency decisions taken while parsing (an end tag
that was ignored, elements closed implicitly, a tag cut short by the end of
input). They are informational: nothing in this package raises on malformed
markup.
"""

import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Optional


class DiagnosticSeverity(Enum):
    """How much a leniency decision changed the output."""

    DEBUG = auto()
    INFO = auto()       # Structure inferred, e.g. implicit close
    WARNING = auto()    # Markup dropped or cut short
    ERROR = auto()
    CRITICAL = auto()   # Tree building aborted, forest is partial


@dataclass
class DiagnosticEntry:
    """One leniency decision, with where it happened and which layer made it.

    ``position`` is the ``TokenPosition.to_dict()`` of the token that
    triggered it; end-of-input repairs carry no position.
    """

    severity: DiagnosticSeverity
    message: str
    component: str
    position: Optional[Dict[str, int]] = None
    details: Optional[Dict[str, Any]] = None
    timestamp: float = field(default_factory=time.time)
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.message:
            raise ValueError("Diagnostic message cannot be empty")
        if not self.component:
            raise ValueError("Diagnostic component cannot be empty")

    def to_dict(self) -> Dict[str, Any]:
        """Serializable form; unset optional fields and the timestamp are left out."""
        data: Dict[str, Any] = {
            "severity": self.severity.name,
            "message": self.message,
            "component": self.component,
        }
        if self.position is not None:
            data["position"] = dict(self.position)
        if self.details:
            data["details"] = dict(self.details)
        if self.correlation_id is not None:
            data["correlation_id"] = self.correlation_id
        return data


def _per_second(count: int, elapsed_ms: float) -> float:
    return count * 1000.0 / elapsed_ms if elapsed_ms > 0 else 0.0


@dataclass
class PerformanceMetrics:
    """Counters for one parse.

    ``recovery_operations`` counts tokenizer repairs plus structural
    repairs (implicit closes, dropped end tags, close at end of input).
    """

    processing_time_ms: float = 0.0
    characters_processed: int = 0
    tokens_generated: int = 0
    elements_created: int = 0
    recovery_operations: int = 0

    @property
    def characters_per_second(self) -> float:
        return _per_second(self.characters_processed, self.processing_time_ms)

    @property
    def tokens_per_second(self) -> float:
        return _per_second(self.tokens_generated, self.processing_time_ms)
