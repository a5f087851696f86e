"""StrEnum types for the swap domain.

All enums use Python 3.13+ StrEnum. Values are lowercase strings.
Use enum members in business logic, never raw strings.
"""

from enum import StrEnum


class Side(StrEnum):
    """Direction of a swap from the end user's point of view."""

    BUY = "buy"
    SELL = "sell"


class QuoteState(StrEnum):
    """Lifecycle state of a swap quote."""

    PRICING = "pricing"
    OPEN = "open"
    CONFIRMING = "confirming"
    CONFIRMED = "confirmed"
    CONFIRM_FAILED = "confirm_failed"
    EXPIRED = "expired"


class NotConfirmableReason(StrEnum):
    """Why a stored quote was refused at confirmation."""

    EXPIRED = "expired"
    WRONG_STATE = "wrong_state"
