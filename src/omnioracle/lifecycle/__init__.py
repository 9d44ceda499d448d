"""Market lifecycle state machine."""

from omnioracle.lifecycle.machine import (
    TRANSITIONS,
    apply_oracle_result,
    begin_oracle_fetch,
    can_transition,
    cancel,
    lock,
    resolve,
    transition,
)

__all__ = [
    "TRANSITIONS",
    "apply_oracle_result",
    "begin_oracle_fetch",
    "can_transition",
    "cancel",
    "lock",
    "resolve",
    "transition",
]
