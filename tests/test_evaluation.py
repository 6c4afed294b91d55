"""
Tests for the evaluation harness and agent loading.
"""

import json
import os

import pytest

from chroma_rush.evaluation.run_eval import (
    ENDINGS,
    EvalReport,
    SeedRun,
    evaluate_agent,
    load_agent,
    load_seed_bank,
    main,
    write_report,
)

REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
BASELINE = os.path.join(REPO_ROOT, "contestants", "baseline_matcher")


def make_run(seed, score, peak_multiplier, ending):
    return SeedRun(
        seed=seed,
        score=score,
        gates_passed=score,
        max_combo=score,
        peak_multiplier=peak_multiplier,
        frames=100,
        ending=ending,
        wall_time=0.0,
    )


class TestSeedBank:
    """Seed bank loading."""

    def test_default_seed_bank(self):
        seeds = load_seed_bank()
        assert len(seeds) >= 5
        assert all(isinstance(s, int) for s in seeds)
        assert len(set(seeds)) == len(seeds)

    def test_custom_seed_bank(self, tmp_path):
        path = tmp_path / "seeds.json"
        path.write_text(json.dumps({"seeds": [3, 9]}))
        assert load_seed_bank(str(path)) == [3, 9]


class TestLoadAgent:
    """Agent discovery."""

    def test_load_baseline_directory(self):
        assert callable(load_agent(BASELINE))

    def test_load_template_file(self):
        act = load_agent(os.path.join(REPO_ROOT, "contestants", "team_template", "agent.py"))
        assert callable(act)

    def test_missing_agent(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_agent(str(tmp_path))

    def test_module_without_agent(self, tmp_path):
        path = tmp_path / "agent.py"
        path.write_text("VALUE = 1\n")
        with pytest.raises(AttributeError):
            load_agent(str(path))

    def test_standalone_act_function(self, tmp_path):
        path = tmp_path / "agent.py"
        path.write_text("def act(obs):\n    return 0\n")
        assert load_agent(str(path))({}) == 0


class TestEvalReport:
    """Aggregates over seed runs."""

    @pytest.fixture
    def report(self):
        return EvalReport(
            runs=[
                make_run(1, 4, 1.0, "wrong_color"),
                make_run(2, 12, 2.0, "truncated"),
                make_run(3, 8, 1.5, "wrong_color"),
                make_run(4, 30, 2.0, "missed_gate"),
            ],
            tiers=[1.5, 2.0],
        )

    def test_score_stats(self, report):
        assert report.mean_score == pytest.approx(13.5)
        assert report.median_score == pytest.approx(10.0)
        assert report.min_score == 4
        assert report.max_score == 30

    def test_endings_breakdown(self, report):
        assert report.endings() == {"wrong_color": 2, "missed_gate": 1, "truncated": 1}

    def test_endings_lists_unseen_endings(self):
        report = EvalReport(runs=[make_run(1, 0, 1.0, "wrong_color")])
        assert set(report.endings()) == set(ENDINGS)
        assert report.endings()["missed_gate"] == 0

    def test_tier_reach(self, report):
        assert report.tier_reach() == {1.5: 0.75, 2.0: 0.5}

    def test_write_report(self, report, tmp_path):
        output = tmp_path / "report.json"
        write_report(report, "fixture_agent", str(output))
        data = json.loads(output.read_text())
        assert data["agent"] == "fixture_agent"
        assert data["endings"]["wrong_color"] == 2
        assert data["tier_reach"] == {"x1.5": 0.75, "x2": 0.5}
        assert [r["seed"] for r in data["runs"]] == [1, 2, 3, 4]


class TestEvaluate:
    """Running agents on seeds."""

    def test_baseline_scores_on_every_seed(self):
        summary = evaluate_agent(load_agent(BASELINE), seeds=[1, 2], verbose=False, max_frames=600)
        assert len(summary.runs) == 2
        assert summary.min_score > 0
        assert all(r.frames == 600 for r in summary.runs)
        assert summary.endings()["truncated"] == 2
        assert all(r.gates_passed > 0 for r in summary.runs)

    def test_tiers_come_from_config(self):
        summary = evaluate_agent(lambda obs: 0, seeds=[5], verbose=False, max_frames=10)
        assert summary.tiers == [1.5, 2.0]

    def test_idle_agent_fails(self):
        summary = evaluate_agent(lambda obs: 0, seeds=[5], verbose=False)
        assert summary.runs[0].ending in ("wrong_color", "missed_gate")

    def test_empty_seed_list_rejected(self):
        with pytest.raises(ValueError):
            evaluate_agent(lambda obs: 0, seeds=[], verbose=False)


class TestCli:
    """chroma-rush-eval entry point."""

    def test_writes_report(self, tmp_path, capsys):
        seeds = tmp_path / "seeds.json"
        seeds.write_text(json.dumps({"seeds": [11]}))
        output = tmp_path / "out.json"
        code = main([
            "--agent", BASELINE,
            "--seeds", str(seeds),
            "--max-frames", "120",
            "--output", str(output),
            "--quiet",
        ])
        assert code == 0
        assert "Endings:" in capsys.readouterr().out
        assert json.loads(output.read_text())["agent"] == "baseline_matcher"

    def test_bad_agent_returns_error(self, tmp_path):
        assert main(["--agent", str(tmp_path)]) == 1
