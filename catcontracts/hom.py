"""
Function Contracts

hom(*params, result) builds a contract for callables. Applying it to a
callable returns a GuardedFunction that checks the argument list on the
way in and the result on the way out.

    add = hom(int32, int32, int32)(lambda a, b: a + b)
    add(3, 4)        # 7
    add(3, "4")      # TypeMismatch, the lambda never runs

OPTIONAL PARAMETERS:
====================
opt(c) marks a parameter optional. Optional parameters must form a
contiguous suffix; hom(int32, opt(int32), int32) accepts one or two
arguments. The precondition is the union of the products for every
allowed arity.

RECEIVERS:
==========
Guarded functions bind like methods: the instance is passed through to
the wrapped callable unchecked. .self(receiver_contract) additionally
checks the instance:

    class Counter:
        @hom(int32, int32).self(instance_of_counter)
        def add(self, n): ...

Side effects of the wrapped callable are not undone when the result
fails its contract.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Optional, Sequence, Tuple
import functools
import inspect

from .config import get_config
from .errors import ArityMismatch, ConstructionError, ContractViolation, describe
from .observability import get_observer
from .primitives import Contract, func
from .structural import _contract, _contract_list, product, union


_NO_RECEIVER = object()


def _label(c) -> str:
    if isinstance(c, (FunctionContract, ForwardContract)):
        return repr(c)
    return getattr(c, "__name__", None) or repr(c)


def _report(err: ContractViolation, site: str):
    if get_config().record_violations:
        get_observer().record_violation(err, site=site)


# =============================================================================
# OPTIONAL MARKER
# =============================================================================

@dataclass(frozen=True)
class Opt:
    """Marks a hom parameter as optional."""
    contract: Contract

    def __repr__(self) -> str:
        return f"opt({_label(self.contract)})"


def opt(c: Contract) -> Opt:
    return Opt(_contract(c, "opt"))


# =============================================================================
# FUNCTION CONTRACT
# =============================================================================

class FunctionContract:
    """
    A contract for callables: parameter contracts plus a result contract.

    Constructed once, then applied to any number of callables.
    """

    def __init__(self, *specs):
        if not specs:
            raise ConstructionError("hom needs at least a result contract.")
        *params, result = specs

        inputs = []
        optional = 0
        for p in params:
            if isinstance(p, Opt):
                optional += 1
                inputs.append(p.contract)
            elif optional:
                raise ConstructionError("Optional arguments must all be at the end.")
            else:
                inputs.append(p)

        if isinstance(result, Opt):
            raise ConstructionError("The result contract cannot be optional.")

        self.inputs: Tuple[Contract, ...] = tuple(_contract_list(inputs, "hom"))
        self.result: Contract = _contract(result, "hom")
        self.optional = optional
        self.max_arity = len(self.inputs)
        self.min_arity = self.max_arity - optional

        if optional == 0:
            self._precondition = product(self.inputs)
        else:
            # Longest signature first.
            self._precondition = union([
                product(self.inputs[:arity])
                for arity in range(self.max_arity, self.min_arity - 1, -1)
            ])

    def precondition(self, args: Sequence[Any]) -> list:
        """Validate an argument list; returns the validated list."""
        count = len(args)
        if not self.min_arity <= count <= self.max_arity:
            if self.optional:
                expected = f"{self.min_arity} to {self.max_arity}"
            else:
                expected = str(self.max_arity)
            raise ArityMismatch(
                f"Expected {expected} arguments, got {count}.", expected, tuple(args)
            )
        return self._precondition(list(args))

    def postcondition(self, value: Any) -> Any:
        return self.result(value)

    def __call__(self, fn):
        if isinstance(fn, GuardedFunction) and fn.contract is self:
            return fn
        func(fn)
        if not get_config().enabled:
            return fn
        return GuardedFunction(self, fn)

    def bind_receiver(self, receiver_contract: Contract):
        """
        Returns a decorator producing methods that also check their receiver.

        The decorator accepts a plain function (receiver taken from method
        binding or the first argument) or a bound method (receiver fixed to
        its __self__). Applying it twice with the same contracts is a no-op.
        """
        receiver_contract = _contract(receiver_contract, "self")

        def decorate(method):
            if (isinstance(method, SelfGuardedFunction)
                    and method.guard.contract is self
                    and method.receiver_contract is receiver_contract):
                return method
            if not get_config().enabled:
                return method
            if inspect.ismethod(method):
                guard = GuardedFunction(self, method.__func__)
                return SelfGuardedFunction(guard, receiver_contract, method.__self__)
            return self(method).self(receiver_contract)

        return decorate

    self = bind_receiver

    def __repr__(self) -> str:
        params = [
            f"opt({_label(c)})" if i >= self.min_arity else _label(c)
            for i, c in enumerate(self.inputs)
        ]
        return f"hom({', '.join(params)} -> {_label(self.result)})"


def hom(*specs) -> FunctionContract:
    """Creates a contract for a function whose inputs and output satisfy the given contracts."""
    return FunctionContract(*specs)


# =============================================================================
# GUARDED CALLABLES
# =============================================================================

class GuardedFunction:
    """A callable wrapped with the pre- and postconditions of a FunctionContract."""

    def __init__(self, contract: FunctionContract, fn, receiver: Any = _NO_RECEIVER):
        functools.update_wrapper(self, fn)
        self.contract = contract
        self._fn = fn
        self._receiver = receiver

    @property
    def site(self) -> str:
        return getattr(self._fn, "__qualname__", None) or describe(self._fn)

    def unwrap(self):
        return self._fn

    def __get__(self, instance, owner=None):
        if instance is None:
            return self
        return GuardedFunction(self.contract, self._fn, instance)

    def __call__(self, *args):
        return self.invoke(self._receiver, args)

    def invoke(self, receiver: Any, args: Sequence[Any]) -> Any:
        """Check args, call the wrapped function with receiver, check the result."""
        get_observer().record_call(self.site)
        try:
            checked = self.contract.precondition(args)
        except ContractViolation as err:
            err.at("args")
            _report(err, self.site)
            raise

        if receiver is _NO_RECEIVER:
            result = self._fn(*checked)
        else:
            result = self._fn(receiver, *checked)

        try:
            return self.contract.postcondition(result)
        except ContractViolation as err:
            err.at("result")
            _report(err, self.site)
            raise

    def bind_receiver(self, receiver_contract: Contract):
        """
        Specialize this guard to also check the call receiver.

        Returns the guard itself while guards are disabled.
        """
        receiver_contract = _contract(receiver_contract, "self")
        if not get_config().enabled:
            return self
        return SelfGuardedFunction(self, receiver_contract, self._receiver)

    self = bind_receiver

    def __repr__(self) -> str:
        return f"<guarded {self.site}>"


class SelfGuardedFunction:
    """
    A GuardedFunction that also checks the object it is invoked on.

    The receiver comes from method binding, from the bound method it was
    built from, or, when called unbound, from the first positional argument.
    """

    def __init__(self, guard: GuardedFunction, receiver_contract: Contract,
                 receiver: Any = _NO_RECEIVER):
        functools.update_wrapper(self, guard.unwrap())
        self.guard = guard
        self.receiver_contract = receiver_contract
        self._receiver = receiver

    def __get__(self, instance, owner=None):
        if instance is None:
            return self
        return SelfGuardedFunction(self.guard, self.receiver_contract, instance)

    def __call__(self, *args):
        receiver = self._receiver
        if receiver is _NO_RECEIVER:
            if not args:
                err = ArityMismatch("Expected a receiver as the first argument, got none.", "receiver", ())
                _report(err, self.guard.site)
                raise err
            receiver, args = args[0], args[1:]

        try:
            receiver = self.receiver_contract(receiver)
        except ContractViolation as err:
            err.at("self")
            _report(err, self.guard.site)
            raise

        return self.guard.invoke(receiver, args)

    def __repr__(self) -> str:
        return f"<guarded {self.guard.site} on {_label(self.receiver_contract)}>"


# =============================================================================
# SELF-REFERENCE
# =============================================================================

class ForwardContract:
    """
    A contract cell bound after construction.

    Lets an interface name itself as the receiver contract of its own
    methods:

        Fooable = forward("Fooable")
        Fooable.bind(interface({"foo": hom(int32, string).self(Fooable)}))
    """

    def __init__(self, name: str = "forward"):
        self.name = name
        self._target: Optional[Contract] = None

    @property
    def is_bound(self) -> bool:
        return self._target is not None

    def bind(self, contract: Contract) -> ForwardContract:
        if self._target is not None:
            raise ConstructionError(f"Forward contract {self.name!r} is already bound.")
        self._target = _contract(contract, "forward")
        return self

    def __call__(self, x):
        if self._target is None:
            raise ConstructionError(f"Forward contract {self.name!r} used before bind().")
        return self._target(x)

    def __repr__(self) -> str:
        return self.name


def forward(name: str = "forward") -> ForwardContract:
    return ForwardContract(name)
