"""Mythra-Engine exception hierarchy.

The pure lifecycle and payout functions never raise these; they return
structured results. Services raise them when a result has to abort a
request.
"""


class MythraError(Exception):
    """Base exception for all Mythra errors."""

    def __init__(self, message: str = "", code: str = "MYTHRA_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class EventNotFoundError(MythraError):
    """Raised when an event cannot be found in the database."""

    def __init__(self, message: str = "Event not found"):
        super().__init__(message, code="NOT_FOUND")


class QuestionNotFoundError(MythraError):
    """Raised when a DAO question cannot be found."""

    def __init__(self, message: str = "DAO question not found"):
        super().__init__(message, code="NOT_FOUND")


class TicketNotFoundError(MythraError):
    """Raised when a ticket id or mint address matches nothing."""

    def __init__(self, message: str = "Ticket not found"):
        super().__init__(message, code="NOT_FOUND")


class TransitionRejectedError(MythraError):
    """Raised when the lifecycle rejects a requested status change.

    Carries the full structured result so callers can report the failing
    guard.
    """

    def __init__(self, result):
        self.result = result
        code = result.error.value if result.error else "TRANSITION_REJECTED"
        super().__init__(result.message, code=code)

    @property
    def reason(self) -> str | None:
        return self.result.reason.value if self.result.reason else None


class ConcurrentModificationError(MythraError):
    """Raised when an event row changed between read and write."""

    def __init__(self, message: str = "Event was modified concurrently, retry"):
        super().__init__(message, code="CONCURRENT_MODIFICATION")


class InvestmentError(MythraError):
    """Raised when an investment is refused."""

    def __init__(self, message: str = "Investment refused", code: str = "INVESTMENT_REFUSED"):
        super().__init__(message, code=code)


class DAOError(MythraError):
    """Raised when a DAO question or vote operation is refused."""

    def __init__(self, message: str = "DAO operation refused", code: str = "DAO_REFUSED"):
        super().__init__(message, code=code)


class TicketSaleError(MythraError):
    """Raised when a ticket sale is refused."""

    def __init__(self, message: str = "Ticket sale refused", code: str = "SALE_REFUSED"):
        super().__init__(message, code=code)


class CheckInError(MythraError):
    """Raised when an attendee check-in is refused."""

    def __init__(self, message: str = "Check-in refused", code: str = "CHECKIN_REFUSED"):
        super().__init__(message, code=code)


class DistributionError(MythraError):
    """Raised when an ROI distribution cannot be computed or executed."""

    def __init__(self, message: str = "Distribution failed", code: str = "DISTRIBUTION_FAILED"):
        super().__init__(message, code=code)


class LedgerError(MythraError):
    """Raised when the ledger collaborator fails to move funds."""

    def __init__(self, message: str = "Ledger operation failed"):
        super().__init__(message, code="LEDGER_ERROR")
