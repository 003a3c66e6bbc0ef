"""
Structural Combinators

Build compound contracts from simpler ones.

IDENTITY POLICY:
================
- array_of, object_of, product, record: return fresh containers,
  the input is never modified
- interface: writes validated fields back into the input, returns it
- coproduct, named_coproduct: return a fresh (tag, payload) tuple
- intersect, union: return whatever the winning contract returns
- pullback: returns the input itself, never the derived values

FAILURE POLICY:
===============
The first failing component aborts the whole check. Its exception is
re-raised unchanged except for the index or key prepended to its path.
Only union suppresses member failures, and only until all are exhausted.
"""

from __future__ import annotations
from collections.abc import Mapping, MutableMapping
from concurrent.futures import Future
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Optional, Sequence
import copy
import dataclasses

from .errors import (
    ArityMismatch, ConstructionError, ContractViolation, PullbackMismatch,
    TagOutOfRange, TypeMismatch, UnionExhausted, UnknownTag, describe
)
from .primitives import (
    UNDEFINED, Contract, array, class_name_of, kind_of, mapping, nat32, promise
)


# =============================================================================
# CONSTRUCTION CHECKS
# =============================================================================

def _contract_list(cs, combinator: str) -> List[Contract]:
    if isinstance(cs, (str, bytes, Mapping)) or not isinstance(cs, (list, tuple)):
        raise ConstructionError(f"{combinator} expects a list of contracts, got {describe(cs)}.")
    for i, c in enumerate(cs):
        if not callable(c):
            raise ConstructionError(f"{combinator}: item {i} is not callable: {describe(c)}.")
    return list(cs)


def _contract_map(cs, combinator: str) -> Dict[str, Contract]:
    if not isinstance(cs, Mapping):
        raise ConstructionError(f"{combinator} expects a mapping of contracts, got {describe(cs)}.")
    for key, c in cs.items():
        if not isinstance(key, str):
            raise ConstructionError(f"{combinator}: key {key!r} is not a string.")
        if not callable(c):
            raise ConstructionError(f"{combinator}: {key!r} is not callable: {describe(c)}.")
    return dict(cs)


def _contract(c, combinator: str) -> Contract:
    if not callable(c):
        raise ConstructionError(f"{combinator} expects a contract, got {describe(c)}.")
    return c


# =============================================================================
# HOMOGENEOUS CONTAINERS
# =============================================================================

def array_of(c: Contract) -> Contract:
    """Creates a contract for a list or tuple whose elements all satisfy c."""
    c = _contract(c, "array_of")

    def contract(a):
        array(a)
        result = []
        for i, x in enumerate(a):
            try:
                result.append(c(x))
            except ContractViolation as err:
                err.at(i)
                raise
        return result

    return contract


def object_of(c: Contract) -> Contract:
    """Creates a contract for a mapping whose values all satisfy c."""
    c = _contract(c, "object_of")

    def contract(o):
        mapping(o)
        result = {}
        for key, value in o.items():
            try:
                result[key] = c(value)
            except ContractViolation as err:
                err.at(key)
                raise
        return result

    return contract


map_of = object_of


# =============================================================================
# PRODUCTS
# =============================================================================

def product(cs: Sequence[Contract]) -> Contract:
    """
    The product of the given contracts, indexed by position.

    Accepts a list or tuple of exactly len(cs) elements and returns a new
    sequence of the same type holding cs[i](args[i]).
    """
    cs = _contract_list(cs, "product")
    size = len(cs)

    def contract(args):
        array(args)
        if len(args) != size:
            raise ArityMismatch(
                f"Expected {size} elements, got {len(args)}.", str(size), args
            )
        result = []
        for i in range(size):
            try:
                result.append(cs[i](args[i]))
            except ContractViolation as err:
                err.at(i)
                raise
        return tuple(result) if isinstance(args, tuple) else result

    return contract


def _is_namedtuple(x) -> bool:
    return isinstance(x, tuple) and hasattr(type(x), "_fields")


def _is_record(x) -> bool:
    if isinstance(x, Mapping) or _is_namedtuple(x):
        return True
    return kind_of(x) == "object" and class_name_of(x) not in ("Array", "Set")


def _require_record(x):
    if not _is_record(x):
        kind = kind_of(x)
        label = class_name_of(x) if kind == "object" else kind
        raise TypeMismatch(f"Expected a record, got {label}.", "record", x)


def _is_mutable_record(x) -> bool:
    if isinstance(x, Mapping):
        return isinstance(x, MutableMapping)
    if _is_namedtuple(x):
        return False
    return not (dataclasses.is_dataclass(x) and x.__dataclass_params__.frozen)


def _get_field(x, name: str):
    if isinstance(x, Mapping):
        return x.get(name, UNDEFINED)
    return getattr(x, name, UNDEFINED)


def _validate_fields(cs: Dict[str, Contract], x) -> Dict[str, Any]:
    validated = {}
    for name, c in cs.items():
        try:
            validated[name] = c(_get_field(x, name))
        except ContractViolation as err:
            err.at(name)
            raise
    return validated


def _changes(x, validated: Dict[str, Any]) -> Dict[str, Any]:
    """Validated fields whose value differs (by identity) from the input's."""
    return {
        name: value for name, value in validated.items()
        if value is not _get_field(x, name)
    }


def _slot_names(x) -> Optional[FrozenSet[str]]:
    """Attribute names assignable on a plain object; None when any name is."""
    if hasattr(x, "__dict__"):
        return None
    names = set()
    for klass in type(x).__mro__:
        slots = klass.__dict__.get("__slots__", ())
        names.update((slots,) if isinstance(slots, str) else slots)
    return frozenset(names)


def _require_assignable(x, changes: Dict[str, Any], allowed: Optional[Iterable[str]]):
    if allowed is None:
        return
    allowed = frozenset(allowed)
    for name in changes:
        if name not in allowed:
            raise TypeMismatch(
                f"Cannot set field {name!r} on {type(x).__name__}.", "assignable field", x
            ).at(name)


def record(cs: Dict[str, Contract]) -> Contract:
    """
    The product of the given contracts, indexed by name (copy semantics).

    Returns a shallow copy of the input with every described field replaced
    by its validated value; undescribed fields are carried over. The input
    is left untouched. Absent fields are checked as UNDEFINED.

    Mappings copy into a dict, namedtuples through _replace, dataclasses
    (frozen or not) through dataclasses.replace, other objects through
    copy.copy.
    """
    cs = _contract_map(cs, "record")

    def contract(x):
        _require_record(x)
        validated = _validate_fields(cs, x)
        if isinstance(x, Mapping):
            result = dict(x)
            result.update(validated)
            return result

        changes = _changes(x, validated)
        if _is_namedtuple(x):
            _require_assignable(x, changes, x._fields)
            return x._replace(**changes)
        if dataclasses.is_dataclass(x):
            _require_assignable(x, changes, (f.name for f in dataclasses.fields(x) if f.init))
            return dataclasses.replace(x, **changes)

        _require_assignable(x, changes, _slot_names(x))
        result = copy.copy(x)
        for name, value in changes.items():
            setattr(result, name, value)
        return result

    return contract


named_product = record


def interface(cs: Dict[str, Contract]) -> Contract:
    """
    Same as record but writes the validated fields back into the input,
    preserving object identity.

    Read-only mappings, namedtuples and frozen dataclasses are rejected.
    All fields are validated and checked for assignability before any is
    written, so a failure leaves the input unmodified.
    """
    cs = _contract_map(cs, "interface")

    def contract(x):
        _require_record(x)
        if not _is_mutable_record(x):
            raise TypeMismatch(
                f"Expected a mutable record, got a read-only {type(x).__name__}.",
                "mutable record", x
            )
        validated = _validate_fields(cs, x)
        if isinstance(x, MutableMapping):
            x.update(validated)
            return x

        changes = _changes(x, validated)
        _require_assignable(x, changes, _slot_names(x))
        for name, value in changes.items():
            setattr(x, name, value)
        return x

    return contract


# =============================================================================
# COPRODUCTS
# =============================================================================

def _split_choice(choice):
    array(choice)
    if len(choice) != 2:
        raise ArityMismatch(
            f"Expected [tag, payload], got {len(choice)} elements.", "2", choice
        )
    return choice[0], choice[1]


def _tag_out_of_range(tag, size: int) -> TagOutOfRange:
    return TagOutOfRange(
        f"Tag out of range: expected number in [0, {size}), got {describe(tag)}.",
        f"[0, {size})", tag
    ).at(0)


def coproduct(cs: Sequence[Contract]) -> Contract:
    """
    The coproduct of the given contracts, tagged by position.

    Accepts a pair (tag, payload) where tag is a natural below len(cs) and
    payload satisfies cs[tag]. Any other tag is a TagOutOfRange at [0].
    """
    cs = _contract_list(cs, "coproduct")
    size = len(cs)

    def contract(choice):
        tag, payload = _split_choice(choice)
        try:
            nat32(tag)
        except ContractViolation as err:
            raise _tag_out_of_range(tag, size) from err
        if tag >= size:
            raise _tag_out_of_range(tag, size)
        try:
            payload = cs[int(tag)](payload)
        except ContractViolation as err:
            err.at(1)
            raise
        return (tag, payload)

    return contract


def named_coproduct(cs: Dict[str, Contract]) -> Contract:
    """The coproduct of the given contracts, tagged by name."""
    cs = _contract_map(cs, "named_coproduct")

    def contract(choice):
        tag, payload = _split_choice(choice)
        if not isinstance(tag, str) or tag not in cs:
            raise UnknownTag(
                f"Unknown tag: {describe(tag)}.", " | ".join(sorted(cs)), tag
            ).at(0)
        try:
            payload = cs[tag](payload)
        except ContractViolation as err:
            err.at(1)
            raise
        return (tag, payload)

    return contract


# =============================================================================
# REFINEMENT (sets and inclusions)
# =============================================================================

def intersect(cs: Sequence[Contract]) -> Contract:
    """
    Apply every contract in turn, each to the previous one's result.

    This is the product in the category of sets and inclusions.
    """
    cs = _contract_list(cs, "intersect")

    def contract(x):
        result = x
        for c in cs:
            result = c(result)
        return result

    return contract


def union(cs: Sequence[Contract]) -> Contract:
    """
    Succeed with the first contract that accepts the input.

    This is the coproduct in the category of sets and inclusions. Order
    matters: the first match wins, not the most specific one.
    """
    cs = _contract_list(cs, "union")

    def contract(x):
        causes = []
        for c in cs:
            try:
                return c(x)
            except ContractViolation as err:
                causes.append(err)
        raise UnionExhausted(
            f"No match among unioned types: got {describe(x)}.",
            tuple(causes), f"one of {len(cs)} alternatives", x
        )

    return contract


all_of = intersect
any_of = union


# =============================================================================
# PULLBACKS
# =============================================================================

def pullback(fs: Sequence[Callable[[Any], Any]]) -> Contract:
    """
    Given [f, g, ...], a contract for those [x, y, ...] for which
    f(x) == g(y) == ...: the pullback of the functions.

    Returns the input itself, not the derived values.
    """
    fs = _contract_list(fs, "pullback")
    derive = product(fs)
    size = len(fs)

    def contract(args):
        derived = derive(args)
        for i in range(1, size):
            if derived[i] != derived[0]:
                raise PullbackMismatch(
                    f"Failed to match pullback constraint in position {i}: "
                    f"got {describe(derived[i])}, expected {describe(derived[0])}.",
                    i, describe(derived[0]), derived[i]
                )
        return args

    return contract


# =============================================================================
# DEFERRED VALUES
# =============================================================================

def promise_of(c: Contract) -> Contract:
    """
    Creates a contract for an awaitable whose eventual value satisfies c.

    Awaitables become a coroutine yielding the checked value; a
    concurrent.futures.Future becomes a chained Future. The check runs
    when the value arrives, not when the contract is applied.
    """
    c = _contract(c, "promise_of")

    def contract(x):
        promise(x)
        if isinstance(x, Future):
            chained = Future()

            def _settle(done: Future):
                try:
                    chained.set_result(c(done.result()))
                except BaseException as err:
                    chained.set_exception(err)

            x.add_done_callback(_settle)
            return chained

        async def checked():
            return c(await x)

        return checked()

    return contract


# Short names
prodn = product
prods = record
coprodn = coproduct
coprods = named_coproduct
pbn = pullback
