"""Error types raised by the constrained DPW search.

Search failures carry the state and action being expanded when the failure
happened, so the fallback (or the caller) can see where it came from.
A dimension mismatch is never handed to the fallback: ragged cost vectors
mean the problem is mis-specified, and the search stops at the first one.
"""

from typing import Any, Optional


class CDPWError(Exception):
    """Base class for all planner errors."""


class SearchFailure(CDPWError):
    """A step of the search could not be completed.

    Attributes:
        state: State label being expanded (None if unknown)
        action: Action label being expanded (None if not chosen yet)
        cause: Underlying exception, if any
    """

    def __init__(
        self,
        message: str,
        state: Any = None,
        action: Any = None,
        cause: Optional[BaseException] = None
    ):
        super().__init__(message)
        self.state = state
        self.action = action
        self.cause = cause

    def __str__(self) -> str:
        base = super().__str__()
        parts = [f"state={self.state!r}"]
        if self.action is not None:
            parts.append(f"action={self.action!r}")
        if self.cause is not None:
            parts.append(f"cause={type(self.cause).__name__}: {self.cause}")
        return f"{base} ({', '.join(parts)})"


class ModelSimulationFailure(SearchFailure):
    """The transition model raised during a step."""


class EstimatorFailure(SearchFailure):
    """The leaf value/cost estimator raised."""


class ActionGenerationFailure(SearchFailure):
    """The action candidate generator raised."""


class InitializationFailure(SearchFailure):
    """An init_Q / init_N / init_Qc strategy raised or returned an invalid prior."""


class ResetFailure(SearchFailure):
    """The reset_callback could not restore the simulator to a state."""


class NoActionAvailable(SearchFailure):
    """The root has no children to choose from (e.g. zero iterations)."""


class DimensionMismatch(CDPWError):
    """A cost vector does not match the configured number of constraints."""

    def __init__(
        self,
        expected: int,
        actual: int,
        source: str,
        state: Any = None,
        action: Any = None
    ):
        super().__init__(
            f"{source} returned a cost vector of length {actual}, "
            f"expected {expected} (state={state!r}, action={action!r})"
        )
        self.expected = expected
        self.actual = actual
        self.source = source
        self.state = state
        self.action = action
