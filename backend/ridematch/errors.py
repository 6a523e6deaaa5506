"""Engine error taxonomy.

Empty outcomes (no eligible drivers, no feedback in a window) are not errors;
they are represented by result types in the schemas package.
"""


class InvalidTripRequestError(ValueError):
    """Raised when a trip request cannot be scored (bad coordinates, passenger count)."""


class PersistenceError(Exception):
    """Recoverable failure talking to the persistence store. Safe to retry."""


class FeedbackRejectedError(Exception):
    """The raw feedback record could not be written; the caller should retry."""

    def __init__(self, ride_id: str, message: str = "feedback could not be persisted"):
        super().__init__(f"{message} (ride_id={ride_id})")
        self.ride_id = ride_id


class EngineUnavailableError(Exception):
    """The engine cannot serve a recommendation right now (store unreachable)."""
