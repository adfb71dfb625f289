"""Ballot error taxonomy.

Every rejected ledger call raises exactly one of these, before any state
is touched. The set is closed: callers can switch on ``BallotErrorKind``.
Messages follow the revert strings of the original ballot contract.
"""

from __future__ import annotations

import enum


class BallotErrorKind(str, enum.Enum):
    """Classification of rejected ledger calls."""
    UNAUTHORIZED = "Unauthorized"
    ALREADY_VOTED = "AlreadyVoted"
    ALREADY_HAS_RIGHTS = "AlreadyHasRights"
    NO_RIGHT_TO_VOTE = "NoRightToVote"
    SELF_DELEGATION = "SelfDelegation"
    DELEGATION_CYCLE = "DelegationCycle"
    INVALID_PROPOSAL = "InvalidProposal"


class BallotError(Exception):
    """Base class for rejected ledger calls."""

    kind: BallotErrorKind
    default_message: str = "Ballot operation rejected."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class UnauthorizedError(BallotError):
    kind = BallotErrorKind.UNAUTHORIZED
    default_message = "Only chairperson can give right to vote."


class AlreadyVotedError(BallotError):
    kind = BallotErrorKind.ALREADY_VOTED
    default_message = "Already voted."


class AlreadyHasRightsError(BallotError):
    kind = BallotErrorKind.ALREADY_HAS_RIGHTS
    default_message = "The voter already has the right to vote."


class NoRightToVoteError(BallotError):
    kind = BallotErrorKind.NO_RIGHT_TO_VOTE
    default_message = "Has no right to vote"


class SelfDelegationError(BallotError):
    kind = BallotErrorKind.SELF_DELEGATION
    default_message = "Self-delegation is disallowed."


class DelegationCycleError(BallotError):
    kind = BallotErrorKind.DELEGATION_CYCLE
    default_message = "Found loop in delegation."


class InvalidProposalError(BallotError):
    kind = BallotErrorKind.INVALID_PROPOSAL
    default_message = "Invalid proposal index."
