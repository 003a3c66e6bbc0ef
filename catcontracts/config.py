"""
Contract Configuration

Process-wide switches for guarded calls and error reporting.

The default configuration is derived from the environment once, at import:

    CATCONTRACTS_DISABLE=1   guards become pass-through (hom returns the
                             callable unchanged)
"""

from __future__ import annotations
from dataclasses import dataclass, replace
import os


_TRUTHY = ("1", "true", "yes", "on")


@dataclass(frozen=True)
class ContractConfig:
    """Configuration for guard construction and violation reporting."""
    enabled: bool = True
    record_violations: bool = True
    max_repr_length: int = 80

    def __post_init__(self):
        if self.max_repr_length < 8:
            raise ValueError("max_repr_length must be at least 8")

    @staticmethod
    def from_env() -> ContractConfig:
        disabled = os.environ.get("CATCONTRACTS_DISABLE", "").strip().lower()
        return ContractConfig(enabled=disabled not in _TRUTHY)


_config = ContractConfig.from_env()


def get_config() -> ContractConfig:
    return _config


def configure(**changes) -> ContractConfig:
    """Replace fields of the active config; returns the new config."""
    global _config
    _config = replace(_config, **changes)
    return _config


def reset_config() -> ContractConfig:
    """Restore the environment-derived defaults."""
    global _config
    _config = ContractConfig.from_env()
    return _config
