"""
Evaluation Harness
==================

Plays an agent through the seed bank and reports how far it gets: score,
gates passed, how each run ended and which combo multiplier tiers it
reached.

Usage:
    chroma-rush-eval --agent contestants/baseline_matcher [--max-frames 3600]
"""

from __future__ import annotations

import argparse
import importlib.util
import json
import sys
import time
from collections import Counter
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional

import numpy as np

from chroma_rush.core.config_loader import GameConfig, load_config
from chroma_rush.core.env_gym import ChromaRushEnv
from chroma_rush.core.rules import Outcome

SEED_BANK_PATH = Path(__file__).with_name("seed_bank.json")

# Run endings, in report order. Runs that hit the frame limit are truncated.
TRUNCATED = "truncated"
ENDINGS = (Outcome.WRONG_COLOR.value, Outcome.MISSED.value, TRUNCATED)

AgentFn = Callable[[Dict[str, np.ndarray]], int]


@dataclass
class SeedRun:
    """One agent run on one seed."""
    seed: int
    score: int
    gates_passed: int
    max_combo: int
    peak_multiplier: float
    frames: int
    ending: str
    wall_time: float


@dataclass
class EvalReport:
    """All seed runs of one agent, plus the aggregates the CLI prints."""
    runs: List[SeedRun]
    tiers: List[float] = field(default_factory=list)

    @property
    def scores(self) -> np.ndarray:
        return np.array([r.score for r in self.runs], dtype=np.int64)

    @property
    def mean_score(self) -> float:
        return float(self.scores.mean())

    @property
    def median_score(self) -> float:
        return float(np.median(self.scores))

    @property
    def min_score(self) -> int:
        return int(self.scores.min())

    @property
    def max_score(self) -> int:
        return int(self.scores.max())

    def endings(self) -> Dict[str, int]:
        """Run count per ending, every known ending present."""
        counts = Counter(r.ending for r in self.runs)
        return {ending: counts.get(ending, 0) for ending in ENDINGS}

    def tier_reach(self) -> Dict[float, float]:
        """Fraction of runs whose multiplier reached each tier."""
        n = len(self.runs)
        return {
            tier: sum(r.peak_multiplier >= tier for r in self.runs) / n
            for tier in self.tiers
        }

    def to_dict(self) -> dict:
        return {
            "mean_score": self.mean_score,
            "median_score": self.median_score,
            "min_score": self.min_score,
            "max_score": self.max_score,
            "endings": self.endings(),
            "tier_reach": {f"x{tier:g}": frac for tier, frac in self.tier_reach().items()},
            "runs": [asdict(r) for r in self.runs],
        }


def load_seed_bank(path: Optional[str] = None) -> List[int]:
    """Read the seed list from a seed bank JSON file (the packaged one by default)."""
    with open(path or SEED_BANK_PATH, "r") as f:
        return [int(s) for s in json.load(f)["seeds"]]


def load_agent(agent_path: str) -> AgentFn:
    """
    Import an agent and return its act callable.

    Args:
        agent_path: An agent directory holding agent.py, or the file itself.
            The module must define a ChromaRushAgent class or an act function.
    """
    agent_file = Path(agent_path)
    if agent_file.is_dir():
        agent_file = agent_file / "agent.py"
    if not agent_file.exists():
        raise FileNotFoundError(f"Agent file not found: {agent_file}")

    module_name = f"chroma_rush_agent_{agent_file.parent.name}"
    spec = importlib.util.spec_from_file_location(module_name, agent_file)
    if spec is None or spec.loader is None:
        raise ImportError(f"Failed to load agent module from {agent_file}")
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    spec.loader.exec_module(module)

    agent_cls = getattr(module, "ChromaRushAgent", None)
    if agent_cls is not None:
        act = getattr(agent_cls(), "act", None)
        if not callable(act):
            raise AttributeError("ChromaRushAgent must define an act(obs) method")
        return act

    act = getattr(module, "act", None)
    if not callable(act):
        raise AttributeError(f"{agent_file} defines neither ChromaRushAgent nor act()")
    return act


def play_seed(agent_fn: AgentFn, seed: int, max_frames: Optional[int] = None) -> SeedRun:
    """
    Play one run to game over, caps.max_ticks or max_frames, whichever is first.
    """
    env = ChromaRushEnv()
    started = time.perf_counter()
    try:
        obs, info = env.reset(seed=seed)
        gates_passed = 0
        max_combo = 0
        peak_multiplier = info["multiplier"]
        frames = 0

        while True:
            obs, _, terminated, truncated, info = env.step(int(agent_fn(obs)))
            frames += 1
            gates_passed += info["judgements"].count(Outcome.SUCCESS.value)
            max_combo = max(max_combo, info["combo"])
            peak_multiplier = max(peak_multiplier, info["multiplier"])
            if terminated or truncated or (max_frames is not None and frames >= max_frames):
                break
    finally:
        env.close()

    return SeedRun(
        seed=seed,
        score=info["score"],
        gates_passed=gates_passed,
        max_combo=max_combo,
        peak_multiplier=peak_multiplier,
        frames=frames,
        ending=info["terminated_reason"] or TRUNCATED,
        wall_time=time.perf_counter() - started,
    )


def _tier_multipliers(config: GameConfig) -> List[float]:
    return sorted(m for _, m in config.scoring.tiers)


def evaluate_agent(
    agent_fn: AgentFn,
    seeds: Optional[List[int]] = None,
    verbose: bool = True,
    max_frames: Optional[int] = None
) -> EvalReport:
    """Play every seed (the seed bank by default) and collect an EvalReport."""
    if seeds is None:
        seeds = load_seed_bank()
    if not seeds:
        raise ValueError("evaluate_agent needs at least one seed")

    runs = []
    for seed in seeds:
        run = play_seed(agent_fn, seed, max_frames=max_frames)
        runs.append(run)
        if verbose:
            print(f"  seed {run.seed:>6}: score={run.score:<5} gates={run.gates_passed:<4} "
                  f"combo={run.max_combo:<4} {run.ending} after {run.frames} frames")

    tiers = _tier_multipliers(load_config())
    return EvalReport(runs=runs, tiers=tiers)


def print_report(report: EvalReport) -> None:
    print()
    print(f"Seeds:   {len(report.runs)}")
    print(f"Score:   mean {report.mean_score:.1f}  median {report.median_score:.1f}  "
          f"range [{report.min_score}, {report.max_score}]")
    endings = "  ".join(f"{name}={count}" for name, count in report.endings().items())
    print(f"Endings: {endings}")
    for tier, frac in report.tier_reach().items():
        print(f"Reached x{tier:g}: {frac:.0%} of runs")


def write_report(report: EvalReport, agent_name: str, output_path: str) -> None:
    """Write the report, tagged with the agent name, as JSON."""
    data = {"agent": agent_name, **report.to_dict()}
    with open(output_path, "w") as f:
        json.dump(data, f, indent=2)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Evaluate a Chroma Rush agent on the seed bank")
    parser.add_argument("--agent", required=True, help="Agent directory or agent.py file")
    parser.add_argument("--seeds", default=None, help="Seed bank JSON (packaged bank by default)")
    parser.add_argument("--max-frames", type=int, default=None,
                        help="Per-seed frame limit (default: caps.max_ticks)")
    parser.add_argument("--output", default=None, help="Write the report to this JSON file")
    parser.add_argument("--quiet", action="store_true", help="Only print the summary")
    args = parser.parse_args(argv)

    try:
        agent_fn = load_agent(args.agent)
    except (ImportError, AttributeError, FileNotFoundError) as e:
        print(f"Error loading agent: {e}")
        return 1

    report = evaluate_agent(
        agent_fn,
        seeds=load_seed_bank(args.seeds),
        verbose=not args.quiet,
        max_frames=args.max_frames
    )
    print_report(report)

    if args.output:
        write_report(report, Path(args.agent).name, args.output)
        print(f"Report written to {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
