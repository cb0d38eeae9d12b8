"""Domain exceptions for the vote-accounting engine.

Every exception here is a caller-input or state-precondition violation.
None of them is transient; the caller recovers by correcting its input or
waiting for the election state to change (for example, the period opening).
"""

from typing import Any, ClassVar


class ElectionError(Exception):
    """Base class for all election rule violations.

    Attributes:
        code: Stable error code reported to callers
        message: Human readable message
        details: Extra context (ids, names) for logging
    """

    code: ClassVar[str] = "ElectionError"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class VotingNotActive(ElectionError):
    """The voting period is not open."""

    code = "VotingNotActive"

    def __init__(self, now: Any = None):
        super().__init__("Voting is not active", {"now": now})


class Unauthorized(ElectionError):
    """The caller is not the election administrator."""

    code = "Unauthorized"

    def __init__(self, caller_id: str):
        super().__init__(
            f"Caller '{caller_id}' is not authorized", {"caller_id": caller_id}
        )


class AlreadyRegistered(ElectionError):
    code = "AlreadyRegistered"

    def __init__(self, voter_id: str):
        super().__init__(
            f"Voter '{voter_id}' is already registered", {"voter_id": voter_id}
        )


class DuplicateCandidate(ElectionError):
    code = "DuplicateCandidate"

    def __init__(self, name: str):
        super().__init__(f"Candidate '{name}' already exists", {"name": name})


class InvalidCandidateId(ElectionError):
    code = "InvalidCandidateId"

    def __init__(self, candidate_id: int | None):
        super().__init__(
            f"Invalid candidate id: {candidate_id}", {"candidate_id": candidate_id}
        )


class NotRegistered(ElectionError):
    code = "NotRegistered"

    def __init__(self, voter_id: str):
        super().__init__(
            f"Voter '{voter_id}' is not registered", {"voter_id": voter_id}
        )


class AlreadyVoted(ElectionError):
    code = "AlreadyVoted"

    def __init__(self, voter_id: str):
        super().__init__(
            f"Voter '{voter_id}' has already voted", {"voter_id": voter_id}
        )


class DelegateNotRegistered(ElectionError):
    code = "DelegateNotRegistered"

    def __init__(self, voter_id: str):
        super().__init__(
            f"Delegate '{voter_id}' is not registered", {"voter_id": voter_id}
        )


class SelfDelegation(ElectionError):
    """A voter tried to delegate their vote to themselves."""

    code = "SelfDelegation"

    def __init__(self, voter_id: str):
        super().__init__(
            f"Voter '{voter_id}' cannot delegate to themselves",
            {"voter_id": voter_id},
        )


class InvalidPeriod(ElectionError):
    code = "InvalidPeriod"

    def __init__(self, start_time: Any, end_time: Any):
        super().__init__(
            "Voting period start must be before its end",
            {"start_time": start_time, "end_time": end_time},
        )
