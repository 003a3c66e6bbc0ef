"""
Memoizer

Wraps a single-argument function so repeated calls with an already-seen
input return the cached, already-validated output.

KEY POLICY:
===========
- Hashable inputs are keyed by value (dict equality: 1, 1.0 and True
  share a key)
- Unhashable inputs are keyed by identity; the cache holds a reference
  to the input so its id cannot be reused

GUARANTEES:
===========
- The cache belongs to one Memo instance and is never shared
- No eviction: entries live as long as the Memo does
- At most one computation per key, also under concurrent first access;
  the lock is reentrant so recursive memoized functions work
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Hashable, Tuple
import functools
import threading

from .hom import hom
from .observability import get_observer
from .primitives import any_


@dataclass(frozen=True)
class MemoInfo:
    hits: int
    misses: int
    size: int


class Memo:
    """A memoized single-argument function."""

    def __init__(self, fn):
        guarded = hom(any_, any_)(fn)
        functools.update_wrapper(self, fn, updated=())
        self._guarded = guarded
        self._cache: Dict[Hashable, Tuple[Any, Any]] = {}
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0

    @staticmethod
    def _key(x) -> Hashable:
        try:
            hash(x)
        except TypeError:
            return ("identity", id(x))
        return ("value", x)

    def __call__(self, x):
        key = self._key(x)
        with self._lock:
            entry = self._cache.get(key)
            if entry is not None:
                self._hits += 1
                get_observer().record_memo(hit=True)
                return entry[1]

            self._misses += 1
            get_observer().record_memo(hit=False)
            result = self._guarded(x)
            # Keep x alive so identity keys stay unique.
            self._cache[key] = (x, result)
            return result

    def cache_info(self) -> MemoInfo:
        with self._lock:
            return MemoInfo(hits=self._hits, misses=self._misses, size=len(self._cache))

    def __repr__(self) -> str:
        return f"<memo {getattr(self, '__qualname__', self._guarded)!s}>"


def memo(fn) -> Memo:
    """Returns a memoized version of fn."""
    return Memo(fn)
