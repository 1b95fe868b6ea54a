from enum import StrEnum


class DepositStatus(StrEnum):
    """Status of a single transfer into a remote repository."""

    SUBMITTED = "submitted"  # Transferred; awaiting the repository's verdict
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    FAILED = "failed"  # Transfer failed; eligible for retry


class AggregatedDepositStatus(StrEnum):
    """Submission-level status summarizing all of its deposits."""

    NOT_STARTED = "not-started"
    IN_PROGRESS = "in-progress"
    FAILED = "failed"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class CopyStatus(StrEnum):
    """Status of the copy of a submission held by a repository."""

    ACCEPTED = "accepted"
    IN_PROGRESS = "in-progress"
    STALLED = "stalled"
    COMPLETE = "complete"
    REJECTED = "rejected"
