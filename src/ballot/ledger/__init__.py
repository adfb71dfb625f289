"""Election ledger — voting and delegation state machine, errors, invariants."""

from ballot.ledger.election import ElectionLedger
from ballot.ledger.errors import BallotError, BallotErrorKind

__all__ = ["ElectionLedger", "BallotError", "BallotErrorKind"]
