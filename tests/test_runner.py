"""Tests for the batch runner, metrics aggregation and report files."""

import json

import pytest

from varmatch.config import MatchingConfig, RunConfig
from varmatch.matching.semantic import CandidateMatch
from varmatch.metrics import RequestOutcome, aggregate_outcomes
from varmatch.runner import BatchRunner, load_requests


@pytest.fixture
def requests():
    return [
        {
            "id": "r1",
            "extractedVariables": ["target_audience", "topic"],
            "userPreferences": {"audience": "developers"},
        },
        {
            "id": "r2",
            "extractedVariables": ["company_name"],
            "userPreferences": {"company_name": "Acme", "__llm_provider": "Claude"},
        },
        {"id": "bad", "extractedVariables": "company_name", "userPreferences": {}},
    ]


class TestBatchRunner:
    def test_run(self, requests):
        result = BatchRunner(run_config=RunConfig(label="unit")).run(requests)

        assert result.label == "unit"
        assert result.num_requests == 3
        by_id = {o.id: o for o in result.outcomes}
        assert by_id["r1"].matches == [CandidateMatch("target_audience", "audience", 0.9)]
        assert by_id["r2"].num_preferences == 1
        assert by_id["bad"].error is not None

        agg = result.aggregated_metrics
        assert agg.total_requests == 3
        assert agg.failed_requests == 1
        assert agg.total_placeholders == 3
        assert agg.matched_placeholders == 2
        assert agg.coverage == pytest.approx(2 / 3)

    def test_max_requests(self, requests):
        result = BatchRunner(run_config=RunConfig(max_requests=1)).run(requests)
        assert result.num_requests == 1
        assert result.outcomes[0].id == "r1"

    def test_ids_default_to_position(self):
        payload = {"extractedVariables": [], "userPreferences": {}}
        result = BatchRunner().run([payload, "not a request"])
        assert [o.id for o in result.outcomes] == ["0", "1"]
        assert result.outcomes[1].error is not None

    def test_uses_config(self, requests):
        result = BatchRunner(MatchingConfig(min_confidence=0.95)).run(requests)
        assert result.aggregated_metrics.matched_placeholders == 1

    def test_to_dict(self, requests):
        d = BatchRunner().run(requests).to_dict()
        assert d["num_requests"] == 3
        assert d["outcomes"][0]["matches"][0]["suggested"] == "audience"
        assert "error" in d["outcomes"][2]
        assert "coverage" in d["aggregated_metrics"]


class TestLoadRequests:
    def test_json(self, tmp_path, requests):
        path = tmp_path / "requests.json"
        path.write_text(json.dumps(requests))
        assert load_requests(path) == requests

    def test_jsonl(self, tmp_path, requests):
        path = tmp_path / "requests.jsonl"
        path.write_text("\n".join(json.dumps(r) for r in requests) + "\n\n")
        assert load_requests(path) == requests

    def test_not_a_list(self, tmp_path):
        path = tmp_path / "requests.json"
        path.write_text(json.dumps({"extractedVariables": []}))
        with pytest.raises(ValueError, match="JSON list"):
            load_requests(path)


class TestAggregateOutcomes:
    def test_empty(self):
        agg = aggregate_outcomes([])
        assert agg.total_requests == 0
        assert agg.coverage is None
        assert "coverage" not in agg.to_dict()

    def test_all_failed(self):
        agg = aggregate_outcomes([RequestOutcome(id="x", error="boom")])
        assert agg.failed_requests == 1
        assert agg.confidence_mean is None

    def test_statistics(self):
        outcomes = [
            RequestOutcome(
                id="a",
                num_placeholders=2,
                matches=[CandidateMatch("p", "k", 1.0), CandidateMatch("p", "j", 0.8)],
                latency_seconds=0.1,
            ),
            RequestOutcome(id="b", num_placeholders=2, latency_seconds=0.3),
        ]
        agg = aggregate_outcomes(outcomes, wall_time=1.0)
        assert agg.matched_placeholders == 1
        assert agg.total_matches == 2
        assert agg.coverage == pytest.approx(0.25)
        assert agg.confidence_mean == pytest.approx(0.9)
        assert agg.latency_mean == pytest.approx(0.2)
        assert agg.wall_time_seconds == 1.0


class TestResults:
    def test_save_and_load(self, tmp_path, requests):
        from varmatch.results import load_result, save_result

        config = MatchingConfig(dedup_scope="global")
        run_config = RunConfig(output_dir=tmp_path, label="nightly/eu")
        result = BatchRunner(config, run_config).run(requests)

        path = save_result(result, config, run_config)
        assert path.parent == tmp_path
        assert path.name.startswith("nightly_eu_")

        data = load_result(path)
        assert data["label"] == "nightly/eu"
        assert data["config"]["dedup_scope"] == "global"
        assert data["aggregated_metrics"]["failed_requests"] == 1

    def test_compare(self, tmp_path, requests, capsys):
        from varmatch.results import compare_results, save_result

        run_config = RunConfig(output_dir=tmp_path)
        result = BatchRunner(run_config=run_config).run(requests)
        path = save_result(result, MatchingConfig(), run_config)

        missing = tmp_path / "missing.json"
        compare_results([path, missing])

        out = capsys.readouterr().out
        assert "Error loading" in out
        assert "Batch Comparison" in out
        assert "Coverage" in out

    def test_compare_nothing_valid(self, tmp_path, capsys):
        from varmatch.results import compare_results

        compare_results([tmp_path / "missing.json"])
        assert "No valid report files" in capsys.readouterr().out
