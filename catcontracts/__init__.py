"""
Category Contracts

A small algebra of composable runtime contracts: validating functions that
return their (possibly copied) input or raise a ContractViolation.

LAYERS (strictly bottom-up):
============================
1. primitives: kind, class, instance, numeric-range, pattern and sentinel checks
2. structural: products, coproducts, intersection, union, pullback
3. hom: function contracts with optional parameters and receiver checks
4. memo: cached single-argument functions

Import what you need from this namespace; nothing is injected into the
caller's scope.
"""

from .config import ContractConfig, configure, get_config, reset_config
from .errors import (
    ErrorCode,
    ViolationRecord,
    ContractError,
    ConstructionError,
    ContractViolation,
    TypeMismatch,
    PatternMismatch,
    RangeMismatch,
    ArityMismatch,
    TagOutOfRange,
    UnknownTag,
    PullbackMismatch,
    UnionExhausted,
)
from .primitives import (
    UNDEFINED,
    any_,
    id_,
    undef,
    nul,
    nan,
    kind_of,
    type_of,
    func,
    string,
    boolean,
    number,
    symbol,
    obj,
    class_name_of,
    class_of,
    array,
    mapping,
    date_,
    regexp,
    promise,
    instance_of,
    int32,
    nat32,
    int53,
    nat53,
    matches,
)
from .structural import (
    array_of,
    object_of,
    map_of,
    product,
    record,
    named_product,
    interface,
    coproduct,
    named_coproduct,
    intersect,
    union,
    all_of,
    any_of,
    pullback,
    promise_of,
    prodn,
    prods,
    coprodn,
    coprods,
    pbn,
)
from .hom import (
    Opt,
    opt,
    FunctionContract,
    hom,
    GuardedFunction,
    SelfGuardedFunction,
    ForwardContract,
    forward,
)
from .memo import Memo, MemoInfo, memo
from .observability import (
    ContractMetrics,
    ContractObserver,
    ObservabilityConfig,
    ViolationLog,
    get_observer,
    set_observer,
)

__all__ = [
    # Config
    'ContractConfig', 'configure', 'get_config', 'reset_config',
    # Errors
    'ErrorCode', 'ViolationRecord', 'ContractError', 'ConstructionError',
    'ContractViolation', 'TypeMismatch', 'PatternMismatch', 'RangeMismatch',
    'ArityMismatch', 'TagOutOfRange', 'UnknownTag', 'PullbackMismatch',
    'UnionExhausted',
    # Primitives
    'UNDEFINED', 'any_', 'id_', 'undef', 'nul', 'nan', 'kind_of', 'type_of',
    'func', 'string', 'boolean', 'number', 'symbol', 'obj', 'class_name_of',
    'class_of', 'array', 'mapping', 'date_', 'regexp', 'promise',
    'instance_of', 'int32', 'nat32', 'int53', 'nat53', 'matches',
    # Structural
    'array_of', 'object_of', 'map_of', 'product', 'record', 'named_product',
    'interface', 'coproduct', 'named_coproduct', 'intersect', 'union',
    'all_of', 'any_of', 'pullback', 'promise_of',
    'prodn', 'prods', 'coprodn', 'coprods', 'pbn',
    # Function contracts
    'Opt', 'opt', 'FunctionContract', 'hom', 'GuardedFunction',
    'SelfGuardedFunction', 'ForwardContract', 'forward',
    # Memo
    'Memo', 'MemoInfo', 'memo',
    # Observability
    'ContractMetrics', 'ContractObserver', 'ObservabilityConfig',
    'ViolationLog', 'get_observer', 'set_observer',
]
