"""
Baseline Matcher Agent Package

A simple heuristic agent that cycles its color until it matches the next
gate. Serves as a benchmark and example.
"""

from .agent import ChromaRushAgent, create_agent

__all__ = ["ChromaRushAgent", "create_agent"]
