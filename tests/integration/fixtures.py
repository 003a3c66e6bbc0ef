"""
Integration Test Fixtures

Small algebraic structures built entirely from contracts.
All fixtures are explicit - no random generation.
"""

from catcontracts import (
    array_of, boolean, func, hom, int32, record, string
)


# =============================================================================
# MONOIDS
# =============================================================================

def monoid(carrier, times, unit):
    """A monoid as a record of its carrier contract, product and unit."""
    return record({
        "t": func,
        "*": hom(carrier, carrier, carrier),
        "1": carrier,
    })({
        "t": carrier,
        "*": times,
        "1": unit,
    })


def check_monoid_laws(mon, samples):
    """Associativity and unit laws over every triple of samples."""
    times, unit = mon["*"], mon["1"]
    for a in samples:
        assert times(a, unit) == a
        assert times(unit, a) == a
        for b in samples:
            for c in samples:
                assert times(a, times(b, c)) == times(times(a, b), c)


INT32_ADD = monoid(int32, lambda a, b: a + b, 0)
STRING_CONCAT = monoid(string, lambda a, b: a + b, "")
BOOLEAN_AND = monoid(boolean, lambda a, b: a and b, True)


# =============================================================================
# LIST MONAD
# =============================================================================

def lift(t):
    func(t)
    return hom(t, array_of(t))(lambda x: [x])


def flatten(t):
    func(t)

    def _flatten(lists):
        result = []
        for items in lists:
            result.extend(items)
        return result

    return hom(array_of(array_of(t)), array_of(t))(_flatten)


upto = hom(int32, array_of(int32))(lambda n: list(range(n)))
