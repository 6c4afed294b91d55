"""
Chroma Rush Package
===================

Color-matching gate reflex game. The core is a deterministic, frame-stepped
simulation; everything else (Gymnasium env, renderer, human play tool,
evaluation harness) consumes it.

Gameplay constants live in game_config.yaml.
"""
