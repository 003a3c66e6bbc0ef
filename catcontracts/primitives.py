"""
Primitive Contracts

Leaf contracts: each checks one concrete property of a value and returns
the value unchanged, or raises.

KINDS (type_of):
================
null, undefined, boolean, number, string, bytes, symbol, function, object

CLASSES (class_of):
===================
Array, Map, Set, Date, RegExp, Promise, otherwise the type's own name
"""

from __future__ import annotations
from collections.abc import Awaitable, Mapping
from concurrent.futures import Future
from datetime import date
from enum import Enum
from re import Pattern
from typing import Any, Callable, Union
import math
import numbers
import re

from .errors import (
    ConstructionError, PatternMismatch, RangeMismatch, TypeMismatch, describe
)


Contract = Callable[[Any], Any]


# =============================================================================
# SPECIAL VALUES
# =============================================================================

class _Undefined:
    """Marker for an absent field or argument."""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self):
        return (_Undefined, ())


UNDEFINED = _Undefined()


def any_(x):
    """A contract that allows anything."""
    return x


id_ = any_


def undef(x):
    if x is not UNDEFINED:
        raise TypeMismatch(f"Expected undefined, got {describe(x)}.", "undefined", x)
    return x


def nul(x):
    if x is not None:
        raise TypeMismatch(f"Expected None, got {describe(x)}.", "null", x)
    return x


def nan(x):
    if not (_is_real(x) and x != x):
        raise TypeMismatch(f"Expected NaN, got {describe(x)}.", "nan", x)
    return x


# =============================================================================
# KIND TAGS
# =============================================================================

KINDS = frozenset({
    "null", "undefined", "boolean", "number", "string",
    "bytes", "symbol", "function", "object",
})


def _is_real(x) -> bool:
    return isinstance(x, numbers.Real) and not isinstance(x, bool)


def kind_of(value: Any) -> str:
    """The dynamic primitive kind of a value."""
    if value is None:
        return "null"
    if value is UNDEFINED:
        return "undefined"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, Enum):
        return "symbol"
    if isinstance(value, numbers.Real):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (bytes, bytearray)):
        return "bytes"
    if callable(value):
        return "function"
    return "object"


def type_of(name: str) -> Contract:
    """Creates a contract for a value of kind ``name``."""
    if name not in KINDS:
        raise ConstructionError(f"Unknown kind {name!r}; expected one of {sorted(KINDS)}.")

    def contract(v):
        kind = kind_of(v)
        if kind != name:
            raise TypeMismatch(f"Expected {name}, got {kind}.", name, v)
        return v

    contract.__name__ = name
    contract.__qualname__ = name
    return contract


func = type_of("function")
string = type_of("string")
boolean = type_of("boolean")
number = type_of("number")
symbol = type_of("symbol")
obj = type_of("object")


# =============================================================================
# CLASS TAGS
# =============================================================================

def class_name_of(value: Any) -> str:
    """The structural class label of a value."""
    if isinstance(value, (list, tuple)):
        return "Array"
    if isinstance(value, Mapping):
        return "Map"
    if isinstance(value, (set, frozenset)):
        return "Set"
    if isinstance(value, date):
        return "Date"
    if isinstance(value, Pattern):
        return "RegExp"
    if isinstance(value, (Awaitable, Future)):
        return "Promise"
    return type(value).__name__


def class_of(name: str) -> Contract:
    """Creates a contract that tests the structural class label."""
    string(name)

    def contract(v):
        class_name = class_name_of(v)
        if class_name != name:
            raise TypeMismatch(f"Expected {name}, got {class_name}.", name, v)
        return v

    contract.__name__ = name
    contract.__qualname__ = name
    return contract


array = class_of("Array")
mapping = class_of("Map")
date_ = class_of("Date")
regexp = class_of("RegExp")
promise = class_of("Promise")


def instance_of(cls) -> Contract:
    """Creates a contract for an instance of ``cls`` (a type or tuple of types)."""
    types = cls if isinstance(cls, tuple) else (cls,)
    if not types or not all(isinstance(t, type) for t in types):
        raise ConstructionError(f"instance_of expects a type or tuple of types, got {describe(cls)}.")
    label = " or ".join(t.__name__ for t in types)

    def contract(inst):
        if not isinstance(inst, cls):
            raise TypeMismatch(
                f"Expected an instance of {label}, got an instance of {type(inst).__name__}.",
                label, inst
            )
        return inst

    return contract


# =============================================================================
# NUMERIC RANGES
# =============================================================================

_2_31 = 2 ** 31
_2_32 = 2 ** 32
_2_53 = 2 ** 53


def _to_int32(n) -> int:
    """Signed 32-bit truncation (ECMAScript ToInt32)."""
    if isinstance(n, float) and not math.isfinite(n):
        return 0
    m = math.trunc(n) % _2_32
    return m - _2_32 if m >= _2_31 else m


def _is_integral(n) -> bool:
    if isinstance(n, float):
        return math.isfinite(n) and n.is_integer()
    return n == math.trunc(n)


def _require_number(n, expected: str):
    if not _is_real(n):
        raise TypeMismatch(f"Expected {expected}, got {kind_of(n)} {describe(n)}.", expected, n)


def int32(n):
    """Asserts n is a signed 32-bit integer."""
    _require_number(n, "a 32-bit integer")
    if _to_int32(n) != n:
        raise RangeMismatch(f"Expected a 32-bit integer, got {describe(n)}.", "int32", n)
    return n


def nat32(n):
    """Asserts int32 and nonnegative."""
    _require_number(n, "a 32-bit natural")
    if _to_int32(n) != n or n < 0:
        raise RangeMismatch(f"Expected a 32-bit natural, got {describe(n)}.", "nat32", n)
    return n


def int53(n):
    _require_number(n, "a 53-bit integer")
    if _is_integral(n) and abs(n) < _2_53:
        return n
    raise RangeMismatch(
        f"Expected an integer n such that abs(n) < 2**53, got {describe(n)}.", "int53", n
    )


def nat53(n):
    _require_number(n, "a 53-bit natural")
    if _is_integral(n) and 0 <= n < _2_53:
        return n
    raise RangeMismatch(
        f"Expected a natural n such that n < 2**53, got {describe(n)}.", "nat53", n
    )


# =============================================================================
# PATTERNS
# =============================================================================

def matches(pattern: Union[str, Pattern]) -> Contract:
    """Creates a contract for strings in which ``pattern`` is found."""
    if isinstance(pattern, str):
        pattern = re.compile(pattern)
    regexp(pattern)

    def contract(x):
        string(x)
        if pattern.search(x) is None:
            raise PatternMismatch(
                f"Expected a string matching {pattern.pattern!r}, got {describe(x)}.",
                pattern.pattern, x
            )
        return x

    return contract
