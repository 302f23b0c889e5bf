"""
Error types for the Spread Pick'em application

Validation rejections are user-correctable and are returned as values by the
validator; the exceptions below are raised at the service and API boundary.
"""

import enum


class RejectionReason(str, enum.Enum):
    """Why a pick (or a set of picks) was refused"""

    TOTAL_CAP_EXCEEDED = "TOTAL_CAP_EXCEEDED"
    THURSDAY_CAP_EXCEEDED = "THURSDAY_CAP_EXCEEDED"
    MONDAY_CAP_EXCEEDED = "MONDAY_CAP_EXCEEDED"
    FLEX_CAP_EXCEEDED = "FLEX_CAP_EXCEEDED"
    LOCK_NOT_IN_SELECTION = "LOCK_NOT_IN_SELECTION"
    LOCK_CAP_EXCEEDED = "LOCK_CAP_EXCEEDED"
    GAME_ALREADY_STARTED = "GAME_ALREADY_STARTED"
    NO_PICKS_SELECTED = "NO_PICKS_SELECTED"


class PickemError(Exception):
    """Base class for errors surfaced to API callers"""

    code = "PICKEM_ERROR"
    status_code = 500
    retryable = False

    def to_dict(self):
        return {"error": str(self), "code": self.code}


class MalformedInputError(PickemError, ValueError):
    """Input does not have the shape the engine expects (caller bug)"""

    code = "MALFORMED_INPUT"
    status_code = 400


class ResultsNotFound(PickemError):
    """No official results have been entered for the requested week"""

    code = "NOT_FOUND"
    status_code = 404


class SubmissionConflict(PickemError):
    """Concurrent submissions collided on the (user, game) uniqueness constraint

    Retry by validating again against a fresh snapshot.
    """

    code = "SUBMISSION_CONFLICT"
    status_code = 409
    retryable = True

    def to_dict(self):
        data = super().to_dict()
        data["retryable"] = True
        return data


class PickRejected(PickemError):
    """A submission failed validation"""

    status_code = 422

    def __init__(self, reason, message=None):
        self.reason = RejectionReason(reason)
        super().__init__(message or self.reason.value)

    @property
    def code(self):
        return self.reason.value

    def to_dict(self):
        return {
            "accepted": False,
            "reason": self.reason.value,
            "message": str(self),
            "error": str(self),
            "code": self.reason.value,
        }
