# core/exceptions.py
"""
Typed failures raised by the approval chain builder and engine.

Every error carries a stable ``error_code`` and an HTTP status so the API
layer can turn it into a JSON response without inspecting messages.
"""
from typing import Optional


class ApprovalError(Exception):
    """Base exception for all approval workflow errors."""

    error_code: str = "ERR_APPROVAL"
    default_message: str = "The approval request could not be processed."
    http_status: int = 400
    retryable: bool = False

    def __init__(self, message: Optional[str] = None, details: Optional[dict] = None) -> None:
        """
        Initialize approval exception.

        Args:
            message: Custom error message. If None, uses default_message.
            details: Additional context dictionary for debugging.
        """
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Convert exception to dictionary for API responses."""
        return {
            "success": False,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }


# Chain builder
class UnresolvedApprover(ApprovalError):
    """Raised when no active user occupies a role the chain requires."""

    error_code = "ERR_UNRESOLVED_APPROVER"
    default_message = "No user occupies a required approver role for this branch."
    http_status = 422


class EmptyChain(ApprovalError):
    """Raised when the submitter's role resolves to zero approval steps."""

    error_code = "ERR_EMPTY_CHAIN"
    default_message = "No approval sequence is configured for this submitter."
    http_status = 422


# Chain engine
class NotYourTurn(ApprovalError):
    """Raised when a decision is attempted out of sequence."""

    error_code = "ERR_NOT_YOUR_TURN"
    default_message = "It is not your turn to decide on this item."
    http_status = 409
    retryable = True


class StepAlreadyDecided(ApprovalError):
    """Raised when the actor's step (or the whole chain) is already decided."""

    error_code = "ERR_STEP_ALREADY_DECIDED"
    default_message = "This approval step has already been decided."
    http_status = 409


class CommentsRequired(ApprovalError):
    """Raised when a rejection carries no justification."""

    error_code = "ERR_COMMENTS_REQUIRED"
    default_message = "Comments are required when rejecting."
    http_status = 400


class InvalidDecision(ApprovalError):
    """Raised when the decision is neither Approved nor Rejected."""

    error_code = "ERR_INVALID_DECISION"
    default_message = "Decision must be either 'Approved' or 'Rejected'."
    http_status = 400


class ConcurrentModification(ApprovalError):
    """Raised when the client's revision is stale or the write kept losing races."""

    error_code = "ERR_CONCURRENT_MODIFICATION"
    default_message = "The item was changed by someone else. Refresh and try again."
    http_status = 409
    retryable = True


class InvalidResubmission(ApprovalError):
    """Raised when resubmission is attempted on a non-rejected item or by someone else."""

    error_code = "ERR_INVALID_RESUBMISSION"
    default_message = "Only the submitter can resubmit a rejected item."
    http_status = 409
