"""Console user interface components."""

from .recovery_screen import RecoveryScreen

__all__ = [
    "RecoveryScreen",
]
