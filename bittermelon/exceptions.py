"""
Engine Errors

Every error the aggregation engine surfaces derives from BitterMelonError so
a service layer on top can map the whole family in one place.

- NotFoundError: referenced scale/critic/feature/review/outlet is missing
- ConflictError: a critic already reviewed the title
- ConstraintViolationError: a delete is blocked by dependent rows
- RecomputeError: statistics recompute failed; the mutation was rolled back
- LockTimeoutError: a statistics key stayed locked past the timeout
"""


class BitterMelonError(Exception):
    """Base class for engine errors."""

    pass


class NotFoundError(BitterMelonError):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity: str, key: object) -> None:
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} with id {key} not found")


class ConflictError(BitterMelonError):
    """Raised when a critic tries to review the same title twice."""

    def __init__(self, critic_id: int, feature_id: int) -> None:
        self.critic_id = critic_id
        self.feature_id = feature_id
        super().__init__(
            f"Critic {critic_id} has already reviewed feature {feature_id}. "
            "Update the existing review instead."
        )


class ConstraintViolationError(BitterMelonError):
    """Raised when an operation is blocked by rows that depend on the target."""

    pass


class RecomputeError(BitterMelonError):
    """Raised when refreshing statistics fails inside a ledger mutation."""

    pass


class LockTimeoutError(BitterMelonError):
    """Raised when a statistics key cannot be locked in time."""

    pass
