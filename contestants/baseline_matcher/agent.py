"""
Baseline Matcher Agent - Matches the color of the next gate.

This is a simple heuristic agent that reads `next_gate_color` (the nearest
gate that has not been judged yet) and presses activate until the player
color matches it.

This serves as:
1. A working example of how to read observations and return actions
2. A baseline benchmark to compare against
3. A verification that the environment API works correctly

Strategy:
- If there is no gate ahead, wait
- If the player color differs from the next gate, press activate
- Optionally wait `reaction_frames` after a new gate appears, to mimic
  a human reaction time
"""

from typing import Any, Dict, Optional


WAIT = 0
ACTIVATE = 1


class ChromaRushAgent:
    """
    Baseline agent that keeps the player color equal to the next gate color.

    Every gate is centered and wider than the player, so color is the only
    thing that has to be right.
    """

    def __init__(self, reaction_frames: int = 0, debug: bool = False):
        """
        Initialize the agent.

        Args:
            reaction_frames: Frames to wait after the target color changes.
            debug: If True, print decisions to stdout.
        """
        self.reaction_frames = reaction_frames
        self.debug = debug
        self._target = -1
        self._frames_on_target = 0

    def reset(self, seed: Optional[int] = None) -> None:
        """Reset agent state for a new episode."""
        self._target = -1
        self._frames_on_target = 0

    def act(self, observation: Dict[str, Any]) -> int:
        """
        Choose whether to press activate this frame.

        Args:
            observation: Dict of numpy arrays from the environment.

        Returns:
            1 to activate, 0 to wait.
        """
        target = int(observation["next_gate_color"])
        color = int(observation["color_index"])

        if target != self._target:
            self._target = target
            self._frames_on_target = 0
        else:
            self._frames_on_target += 1

        if target < 0 or target == color:
            return WAIT
        if self._frames_on_target < self.reaction_frames:
            return WAIT

        if self.debug:
            distance = float(observation["next_gate_distance"])
            print(f"[Matcher] color {color} -> target {target} (gate {distance:.0f} away)")

        return ACTIVATE


def create_agent(reaction_frames: int = 0, debug: bool = False) -> ChromaRushAgent:
    """Factory function to create agent instance."""
    return ChromaRushAgent(reaction_frames=reaction_frames, debug=debug)


if __name__ == "__main__":
    from chroma_rush.core.env_gym import ChromaRushEnv

    env = ChromaRushEnv()
    agent = create_agent(debug=False)

    obs, info = env.reset(seed=42)
    agent.reset()

    done = False
    steps = 0
    while not done:
        action = agent.act(obs)
        obs, reward, terminated, truncated, info = env.step(action)
        done = terminated or truncated
        steps += 1

    print(f"Finished after {steps} frames: score={info['score']} "
          f"combo={info['combo']} reason={info['terminated_reason'] or 'truncated'}")
    env.close()
