"""Tests for scenario replay — proves scripted elections load and run in order."""

import json
from pathlib import Path

import pytest

from ballot.config import BallotConfig
from ballot.scenario import load_scenario, parse_scenario, run_scenario

SCENARIOS = Path(__file__).resolve().parents[1] / "scenarios"


class TestParsing:
    def test_minimal_scenario_uses_config(self) -> None:
        scenario = parse_scenario({"operations": []})
        service = scenario.build_service(BallotConfig(chairperson="0xcfg"))
        assert service.ledger.chairperson == "0xcfg"
        assert service.ledger.proposal_count == 3

    def test_unknown_op_rejected(self) -> None:
        with pytest.raises(ValueError, match="unknown op"):
            parse_scenario({"operations": [{"op": "burn", "caller": "x"}]})

    def test_missing_field_rejected(self) -> None:
        with pytest.raises(ValueError, match="missing to"):
            parse_scenario({"operations": [{"op": "delegate", "caller": "x"}]})

    def test_empty_proposals_rejected(self) -> None:
        with pytest.raises(ValueError, match="non-empty"):
            parse_scenario({"proposals": []})

    def test_non_object_operation_rejected(self) -> None:
        with pytest.raises(ValueError, match="expected an object"):
            parse_scenario({"operations": ["vote"]})

    @pytest.mark.parametrize("bad", [["0xalice"], 7, "", None])
    def test_non_string_identity_rejected(self, bad: object) -> None:
        with pytest.raises(ValueError, match="caller must be a non-empty string"):
            parse_scenario(
                {"operations": [{"op": "vote", "caller": bad, "proposal": 0}]}
            )

    def test_non_string_delegate_target_rejected(self) -> None:
        with pytest.raises(ValueError, match=r"operation 2 \(delegate\): to must be"):
            parse_scenario({"operations": [
                {"op": "vote", "caller": "0xa", "proposal": 0},
                {"op": "delegate", "caller": "0xa", "to": {"id": "0xb"}},
            ]})

    def test_non_string_chairperson_rejected(self) -> None:
        with pytest.raises(ValueError, match="chairperson must be"):
            parse_scenario({"chairperson": 1, "operations": []})


class TestReplay:
    def test_bundled_delegation_scenario(self) -> None:
        scenario = load_scenario(SCENARIOS / "delegation.json")
        service = scenario.build_service(BallotConfig())
        results = run_scenario(service, scenario)
        assert [r.success for r in results] == [True] * 7 + [False]
        assert results[-1].data["error"] == "Unauthorized"
        assert service.ledger.proposal(2).vote_count == 4
        assert service.winner_name() == "Proposal 3"
        assert service.check_invariants() == []

    def test_load_from_file(self, tmp_path: Path) -> None:
        path = tmp_path / "s.json"
        path.write_text(json.dumps({
            "chairperson": "0xc",
            "proposals": ["Yes", "No"],
            "operations": [{"op": "vote", "caller": "0xc", "proposal": 1}],
        }), encoding="utf-8")
        scenario = load_scenario(path)
        service = scenario.build_service(BallotConfig())
        results = run_scenario(service, scenario)
        assert results[0].success
        assert service.winner_name() == "No"
