"""
Primitive Contract Tests

INVARIANTS TESTED:
1. A satisfied primitive returns its input unchanged (same object)
2. A kind, class or instance mismatch raises TypeMismatch
3. Numeric contracts raise TypeMismatch for non-numbers and
   RangeMismatch for non-integral or out-of-range numbers
4. Malformed construction raises ConstructionError
"""

import asyncio
import re
from concurrent.futures import Future
from datetime import date, datetime
from enum import Enum

import pytest

from catcontracts import (
    UNDEFINED, ConstructionError, ErrorCode, PatternMismatch, RangeMismatch,
    TypeMismatch, any_, array, boolean, class_name_of, class_of, date_, func,
    instance_of, int32, int53, kind_of, mapping, matches, nan, nat32, nat53,
    nul, number, obj, promise, regexp, string, symbol, type_of, undef
)


class Color(Enum):
    RED = 1


# =============================================================================
# SENTINELS
# =============================================================================

class TestSentinels:

    def test_any_accepts_everything(self):
        marker = object()
        assert any_(marker) is marker
        assert any_(None) is None

    def test_undef_accepts_only_undefined(self):
        assert undef(UNDEFINED) is UNDEFINED
        with pytest.raises(TypeMismatch):
            undef(None)

    def test_undefined_is_falsy_singleton(self):
        assert not UNDEFINED
        assert repr(UNDEFINED) == "UNDEFINED"
        assert type(UNDEFINED)() is UNDEFINED

    def test_nul_accepts_only_none(self):
        assert nul(None) is None
        with pytest.raises(TypeMismatch):
            nul(0)

    def test_nan(self):
        value = float("nan")
        assert nan(value) is value
        with pytest.raises(TypeMismatch):
            nan(1.0)
        with pytest.raises(TypeMismatch):
            nan("nan")


# =============================================================================
# KIND TAGS
# =============================================================================

class TestKinds:

    @pytest.mark.parametrize("value,kind", [
        (None, "null"),
        (UNDEFINED, "undefined"),
        (True, "boolean"),
        (3, "number"),
        (2.5, "number"),
        ("s", "string"),
        (b"b", "bytes"),
        (Color.RED, "symbol"),
        (len, "function"),
        (lambda: None, "function"),
        ([], "object"),
        ({}, "object"),
    ])
    def test_kind_of(self, value, kind):
        assert kind_of(value) == kind

    def test_ready_made_kinds(self):
        assert func(len) is len
        assert string("x") == "x"
        assert boolean(False) is False
        assert number(1.5) == 1.5
        assert symbol(Color.RED) is Color.RED
        data = {"a": 1}
        assert obj(data) is data

    def test_bool_is_not_a_number(self):
        with pytest.raises(TypeMismatch) as exc:
            number(True)
        assert exc.value.code == ErrorCode.TYPE_MISMATCH
        assert exc.value.expected == "number"

    def test_mismatch_carries_actual_value(self):
        with pytest.raises(TypeMismatch) as exc:
            string(42)
        assert exc.value.actual == 42
        assert "Expected string, got number" in str(exc.value)

    def test_unknown_kind_is_construction_error(self):
        with pytest.raises(ConstructionError):
            type_of("integer")


# =============================================================================
# CLASS TAGS
# =============================================================================

class TestClasses:

    def test_class_names(self):
        assert class_name_of([1]) == "Array"
        assert class_name_of((1,)) == "Array"
        assert class_name_of({"a": 1}) == "Map"
        assert class_name_of({1}) == "Set"
        assert class_name_of(date(2024, 1, 1)) == "Date"
        assert class_name_of(datetime(2024, 1, 1)) == "Date"
        assert class_name_of(re.compile("x")) == "RegExp"
        assert class_name_of(Future()) == "Promise"
        assert class_name_of(3) == "int"

    def test_ready_made_classes(self):
        items = [1, 2]
        assert array(items) is items
        assert mapping({}) == {}
        today = date.today()
        assert date_(today) is today
        pattern = re.compile("a")
        assert regexp(pattern) is pattern

    def test_coroutine_is_a_promise(self):
        async def value():
            return 1

        coro = value()
        try:
            assert promise(coro) is coro
        finally:
            coro.close()

    def test_string_is_not_an_array(self):
        with pytest.raises(TypeMismatch):
            array("abc")

    def test_class_of_custom_type_name(self):
        assert class_of("int")(5) == 5
        with pytest.raises(TypeMismatch):
            class_of("int")(5.0)

    def test_class_of_needs_string_name(self):
        with pytest.raises(TypeMismatch):
            class_of(list)

    def test_instance_of(self):
        class Base:
            pass

        class Child(Base):
            pass

        child = Child()
        assert instance_of(Base)(child) is child
        with pytest.raises(TypeMismatch) as exc:
            instance_of(Child)(Base())
        assert "got an instance of Base" in str(exc.value)

    def test_instance_of_tuple(self):
        contract = instance_of((int, str))
        assert contract("a") == "a"
        with pytest.raises(TypeMismatch):
            contract(1.5)

    def test_instance_of_requires_a_type(self):
        with pytest.raises(ConstructionError):
            instance_of("int")


# =============================================================================
# NUMERIC RANGES
# =============================================================================

class TestInt32:

    @pytest.mark.parametrize("value", [0, 1, -1, 2**31 - 1, -2**31, 3.0, -0.0])
    def test_accepts(self, value):
        assert int32(value) is value

    @pytest.mark.parametrize("value", [2**31, -2**31 - 1, 1.5, float("nan"), float("inf")])
    def test_range_rejects(self, value):
        with pytest.raises(RangeMismatch) as exc:
            int32(value)
        assert exc.value.code == ErrorCode.RANGE_MISMATCH

    @pytest.mark.parametrize("value", ["4", None, True, [1]])
    def test_type_rejects(self, value):
        with pytest.raises(TypeMismatch):
            int32(value)


class TestNat32:

    def test_accepts_zero_and_max(self):
        assert nat32(0) == 0
        assert nat32(2**31 - 1) == 2**31 - 1

    @pytest.mark.parametrize("value", [-1, 2**31, 0.5])
    def test_rejects(self, value):
        with pytest.raises(RangeMismatch):
            nat32(value)


class TestInt53:

    @pytest.mark.parametrize("value", [0, 2**53 - 1, -(2**53 - 1), 2.0**40])
    def test_int53_accepts(self, value):
        assert int53(value) == value

    @pytest.mark.parametrize("value", [2**53, -2**53, 0.5, float("inf"), float("nan")])
    def test_int53_rejects(self, value):
        with pytest.raises(RangeMismatch):
            int53(value)

    def test_nat53(self):
        assert nat53(2**53 - 1) == 2**53 - 1
        with pytest.raises(RangeMismatch):
            nat53(-1)
        with pytest.raises(TypeMismatch):
            nat53("1")


# =============================================================================
# PATTERNS
# =============================================================================

class TestMatches:

    def test_search_semantics(self):
        contract = matches(r"\d+")
        assert contract("abc123") == "abc123"

    def test_compiled_pattern(self):
        contract = matches(re.compile(r"^[a-z]+$"))
        assert contract("abc") == "abc"
        with pytest.raises(PatternMismatch) as exc:
            contract("ABC")
        assert exc.value.code == ErrorCode.PATTERN_MISMATCH

    def test_pattern_mismatch_is_a_type_mismatch(self):
        with pytest.raises(TypeMismatch):
            matches("x")("y")

    def test_non_string_value(self):
        with pytest.raises(TypeMismatch):
            matches(".*")(5)

    def test_pattern_must_be_regexp(self):
        with pytest.raises(TypeMismatch):
            matches(5)


def test_unsettled_future_is_a_promise():
    loop = asyncio.new_event_loop()
    try:
        fut = loop.create_future()
        assert promise(fut) is fut
    finally:
        loop.close()
