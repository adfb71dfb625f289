"""Election configuration from the environment.

Settings come from an optional ``.env`` file, overridden by real
environment variables:

    BALLOT_CHAIRPERSON   address of the chairperson (default: chairperson)
    BALLOT_PROPOSALS     comma-separated proposal names
                         (default: Proposal 1,Proposal 2,Proposal 3)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import dotenv_values

from ballot.models.identifiers import format_bytes32_string

DEFAULT_CHAIRPERSON = "chairperson"
DEFAULT_PROPOSALS: tuple[str, ...] = ("Proposal 1", "Proposal 2", "Proposal 3")

ENV_CHAIRPERSON = "BALLOT_CHAIRPERSON"
ENV_PROPOSALS = "BALLOT_PROPOSALS"


@dataclass(frozen=True)
class BallotConfig:
    """Settings needed to open one election.

    Invariants:
    - chairperson is non-blank
    - at least one proposal, each encodable as a bytes32
    """
    chairperson: str = DEFAULT_CHAIRPERSON
    proposals: tuple[str, ...] = DEFAULT_PROPOSALS

    def __post_init__(self) -> None:
        if not self.chairperson.strip():
            raise ValueError("chairperson must not be blank")
        if not self.proposals:
            raise ValueError("at least one proposal is required")
        for name in self.proposals:
            format_bytes32_string(name)


def parse_proposals(raw: str) -> tuple[str, ...]:
    """Split a comma-separated proposal list, dropping blank entries."""
    return tuple(part.strip() for part in raw.split(",") if part.strip())


def load_config(
    env_file: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> BallotConfig:
    """Build a BallotConfig from a .env file and the process environment.

    Environment variables win over values from the file. A missing
    env_file is not an error.
    """
    values: dict[str, Optional[str]] = {}
    if env_file is not None and env_file.exists():
        values.update(dotenv_values(env_file))
    values.update(os.environ if environ is None else environ)

    chairperson = values.get(ENV_CHAIRPERSON) or DEFAULT_CHAIRPERSON
    raw_proposals = values.get(ENV_PROPOSALS)
    proposals = parse_proposals(raw_proposals) if raw_proposals else DEFAULT_PROPOSALS
    return BallotConfig(chairperson=chairperson.strip(), proposals=proposals)
