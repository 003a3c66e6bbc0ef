"""
Contract Errors

Explicit error taxonomy for every way a contract can fail.

DESIGN PRINCIPLES:
==================
1. Every failure mode has an ErrorCode - no silent fallbacks
2. Failures are raised synchronously where they are detected
3. Composing combinators never translate an error; they only extend its path
4. Any failure can be frozen into an immutable ViolationRecord for audit
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional, Tuple, Union
import reprlib

from .config import get_config


PathItem = Union[int, str]


# =============================================================================
# ERROR CODES (Explicit, never silent)
# =============================================================================

class ErrorCode(Enum):
    """Explicit error codes for contract failures."""
    TYPE_MISMATCH = "type_mismatch"
    PATTERN_MISMATCH = "pattern_mismatch"
    RANGE_MISMATCH = "range_mismatch"
    ARITY_MISMATCH = "arity_mismatch"
    TAG_OUT_OF_RANGE = "tag_out_of_range"
    UNKNOWN_TAG = "unknown_tag"
    PULLBACK_MISMATCH = "pullback_mismatch"
    UNION_EXHAUSTED = "union_exhausted"
    CONSTRUCTION_ERROR = "construction_error"


# =============================================================================
# FORMATTING
# =============================================================================

def describe(value: Any, limit: Optional[int] = None) -> str:
    """Render a value for an error message, truncated to ``limit`` characters."""
    if limit is None:
        limit = get_config().max_repr_length
    short = reprlib.Repr()
    # Leave the final cut to us so truncation always shows at the end.
    short.maxstring = short.maxother = limit * 2
    text = short.repr(value)
    if len(text) > limit:
        text = text[:max(limit - 3, 0)] + "..."
    return text


def format_path(path: Tuple[PathItem, ...]) -> str:
    """Render a path like ``[0].name[2]``."""
    parts = []
    for item in path:
        if isinstance(item, int):
            parts.append(f"[{item}]")
        else:
            parts.append(f".{item}" if parts else str(item))
    return "".join(parts)


# =============================================================================
# AUDIT RECORD
# =============================================================================

@dataclass(frozen=True)
class ViolationRecord:
    """
    Immutable representation of a contract failure.

    Records are data, not exceptions - they can be stored and queried
    long after the exception has been handled.
    """
    code: ErrorCode
    message: str
    expected: str
    actual: str
    path: Tuple[PathItem, ...]
    occurred_at: datetime
    site: Optional[str] = None
    context: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)

    def with_context(self, key: str, value: str) -> ViolationRecord:
        """Return new record with additional context (immutable)."""
        return ViolationRecord(
            code=self.code,
            message=self.message,
            expected=self.expected,
            actual=self.actual,
            path=self.path,
            occurred_at=self.occurred_at,
            site=self.site,
            context=self.context + ((key, value),)
        )


# =============================================================================
# EXCEPTIONS
# =============================================================================

class ContractError(TypeError):
    """Base class of everything this package raises."""
    code: ErrorCode = ErrorCode.CONSTRUCTION_ERROR


class ConstructionError(ContractError):
    """A combinator was built from malformed parts."""
    code = ErrorCode.CONSTRUCTION_ERROR


class ContractViolation(ContractError):
    """
    A value failed a contract.

    ``path`` locates the failing component inside the checked value; it is
    extended in place by the structural combinators as the exception
    propagates outward.
    """
    code = ErrorCode.TYPE_MISMATCH

    def __init__(self, message: str, expected: str = "", actual: Any = None):
        super().__init__(message)
        self.message = message
        self.expected = expected
        self.actual = actual
        self.path: Tuple[PathItem, ...] = ()

    def at(self, item: PathItem) -> ContractViolation:
        """Prepend a path component and return self for re-raising."""
        self.path = (item,) + self.path
        return self

    def __str__(self) -> str:
        if not self.path:
            return self.message
        return f"at {format_path(self.path)}: {self.message}"

    def to_record(self, site: Optional[str] = None) -> ViolationRecord:
        return ViolationRecord(
            code=self.code,
            message=str(self),
            expected=self.expected,
            actual=describe(self.actual),
            path=self.path,
            occurred_at=datetime.now(timezone.utc),
            site=site
        )


class TypeMismatch(ContractViolation):
    """Kind, class, instance or sentinel check failed."""
    code = ErrorCode.TYPE_MISMATCH


class PatternMismatch(TypeMismatch):
    """A string did not match the required pattern."""
    code = ErrorCode.PATTERN_MISMATCH


class RangeMismatch(ContractViolation):
    """A number was not integral or fell outside its range."""
    code = ErrorCode.RANGE_MISMATCH


class ArityMismatch(ContractViolation):
    """A product or argument list had the wrong number of elements."""
    code = ErrorCode.ARITY_MISMATCH


class TagOutOfRange(ContractViolation):
    code = ErrorCode.TAG_OUT_OF_RANGE


class UnknownTag(ContractViolation):
    code = ErrorCode.UNKNOWN_TAG


class PullbackMismatch(ContractViolation):
    """Derived values disagree; ``position`` is the first disagreeing index."""
    code = ErrorCode.PULLBACK_MISMATCH

    def __init__(self, message: str, position: int, expected: str = "", actual: Any = None):
        super().__init__(message, expected=expected, actual=actual)
        self.position = position


class UnionExhausted(ContractViolation):
    """No alternative of a union accepted the value."""
    code = ErrorCode.UNION_EXHAUSTED

    def __init__(self, message: str, causes: Tuple[ContractViolation, ...] = (),
                 expected: str = "", actual: Any = None):
        super().__init__(message, expected=expected, actual=actual)
        self.causes = causes


__all__ = [
    'ErrorCode',
    'ViolationRecord',
    'ContractError',
    'ConstructionError',
    'ContractViolation',
    'TypeMismatch',
    'PatternMismatch',
    'RangeMismatch',
    'ArityMismatch',
    'TagOutOfRange',
    'UnknownTag',
    'PullbackMismatch',
    'UnionExhausted',
    'describe',
    'format_path',
]
