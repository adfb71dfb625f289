"""Core data models for the election ledger."""

from ballot.models.election import (
    DelegationOutcome,
    LedgerSnapshot,
    Proposal,
    Voter,
    VoterStatus,
    leading_proposal,
)
from ballot.models.identifiers import (
    format_bytes32_string,
    parse_bytes32_string,
    to_bytes32,
)

__all__ = [
    "DelegationOutcome",
    "LedgerSnapshot",
    "Proposal",
    "Voter",
    "VoterStatus",
    "leading_proposal",
    "format_bytes32_string",
    "parse_bytes32_string",
    "to_bytes32",
]
