"""
Error taxonomy for the term deposit engine.

The API layer maps each class to an HTTP status. Services
raise these instead of bare ValueError so callers can tell
a bad request from a missing record or a failed dependency.
"""


class TermDepositError(Exception):
    """Base exception for all term deposit errors."""


class ValidationError(TermDepositError):
    """
    Bad input or out-of-bounds amount/term.

    Always raised before any mutation. The reason code lets a
    UI present an actionable message.
    """

    def __init__(self, message: str, reason: str = "invalid_request"):
        super().__init__(message)
        self.reason = reason


class NotFoundError(TermDepositError):
    """Unknown investment or account id."""


class StateConflictError(TermDepositError):
    """Operation not permitted in the record's current status."""


class DependencyError(TermDepositError):
    """The account store or transaction ledger failed."""


class SettlementPartiallyAppliedError(DependencyError):
    """
    The investment was marked MATURED but the payout did not complete.

    Never retried automatically: an operator must reconcile the
    account by hand, since re-running the payout risks crediting twice.
    """

    def __init__(self, investment_id, cause: Exception):
        super().__init__(
            f"Settlement of investment {investment_id} partially applied: "
            f"status is MATURED but payout failed ({cause})"
        )
        self.investment_id = investment_id
        self.cause = cause
