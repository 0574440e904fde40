# experiments/replay.py
"""
Replay a recorded PathRunnerEnv episode in a window.

Usage (from repo root):
  # Replay a heuristic episode by seed (experiments/runs/traces/heuristic/<seed>_actions.npy)
  python -m experiments.replay --policy heuristic --seed 105

  # Point directly at an actions file (seed is read from the file name)
  python -m experiments.replay --trace experiments/runs/traces/random/112_actions.npy

  # Slow the display to the decision rate for readability
  python -m experiments.replay --policy heuristic --seed 105 --slow

Controls: SPACE pause/resume | N single step (when paused) | R restart | ESC quit

Given the same seed, frame_skip and action sequence the replay matches the
recorded run exactly.
"""

from __future__ import annotations
import argparse
import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import numpy as np
import pygame

from pathrunner.env.observations import LOOKAHEAD_ROWS
from pathrunner.env.path_env import PathRunnerEnv
from pathrunner.game.config import WIDTH, HEIGHT, COLOR_FG

DEFAULT_OUT_DIR = "experiments/runs"
ACTION_NAMES = ("NOOP", "LEFT", "RIGHT", "UP", "DOWN", "TOGGLE")

logger = logging.getLogger(__name__)


def find_trace(out_dir: Path, policy: str, seed: int) -> Path:
    p = out_dir / "traces" / policy / f"{seed}_actions.npy"
    if not p.exists():
        raise FileNotFoundError(f"Trace not found: {p}")
    return p


def read_meta(trace_path: Path) -> Dict[str, str]:
    """key=value lines written next to the trace by sanity_rollout (empty if missing)."""
    meta_path = trace_path.with_name(trace_path.name.replace("_actions.npy", "_meta.txt"))
    meta: Dict[str, str] = {}
    if meta_path.exists():
        for line in meta_path.read_text(encoding="utf-8").splitlines():
            if "=" in line:
                k, v = line.split("=", 1)
                meta[k.strip()] = v.strip()
    return meta


def load_trace(trace_path: Path, seed: Optional[int] = None,
               frame_skip: int = -1) -> Tuple[int, np.ndarray, int]:
    """Resolve (seed, actions, frame_skip) for a trace file."""
    actions = np.load(trace_path)
    if actions.ndim != 1:
        raise ValueError(f"Expected 1D action array, got shape {actions.shape}")

    meta = read_meta(trace_path)
    if seed is None:
        if "seed" in meta:
            seed = int(meta["seed"])
        else:
            try:
                seed = int(trace_path.stem.split("_")[0])
            except ValueError:
                raise ValueError(f"Cannot infer the seed from {trace_path.name}; pass --seed") from None
    if frame_skip < 0:
        frame_skip = int(meta.get("frame_skip", 4))
    return seed, actions, frame_skip


def _draw_overlay(env: PathRunnerEnv, step_idx: int, action: Optional[int]):
    surf = pygame.display.get_surface()
    if surf is None or env.sim is None:
        return
    font = pygame.font.SysFont("jetbrainsmono", 16)
    sim = env.sim

    # look-ahead rows the observation samples
    py = sim.player.y
    for dy in LOOKAHEAD_ROWS:
        y = round(py - dy * HEIGHT)
        pygame.draw.line(surf, (90, 180, 255), (0, y), (WIDTH, y), 1)

    lines: List[str] = [
        f"Step={step_idx}  Action={ACTION_NAMES[action] if action is not None else '-'}",
        f"Score={sim.score}  Lvl={sim.difficulty_level}  {sim.pattern.label}",
        f"Cause={sim.state.death_cause or '-'}",
    ]
    panel = pygame.Surface((300, 20 * (len(lines) + 1)), pygame.SRCALPHA)
    panel.fill((10, 20, 35, 160))
    surf.blit(panel, (12, HEIGHT - panel.get_height() - 12))
    y0 = HEIGHT - panel.get_height() - 6
    for i, txt in enumerate(lines):
        surf.blit(font.render(txt, True, COLOR_FG), (20, y0 + i * 20))
    pygame.display.flip()


def replay_episode(seed: int, actions: np.ndarray, frame_skip: int, slow: bool = False):
    env = PathRunnerEnv(render_mode="human", frame_skip=frame_skip, time_limit_seconds=None)
    env.reset(seed=seed)

    paused = False
    single_step = False
    step_idx = 0
    action: Optional[int] = None
    clock = pygame.time.Clock()

    try:
        running = True
        while running and step_idx < len(actions):
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    elif event.key == pygame.K_SPACE:
                        paused = not paused
                    elif event.key == pygame.K_n and paused:
                        single_step = True
                    elif event.key == pygame.K_r:
                        env.reset(seed=seed)
                        step_idx = 0
                        paused = False

            if paused and not single_step:
                env.render()
                _draw_overlay(env, step_idx, action)
                clock.tick(60)
                continue
            single_step = False

            action = int(actions[step_idx])
            _, _, term, trunc, info = env.step(action)
            _draw_overlay(env, step_idx, action)
            step_idx += 1

            clock.tick(15 if slow else 60)
            if term or trunc:
                print(f"Episode ended at step {step_idx}: score={info['score']} "
                      f"cause={info['death_cause']}")
                pygame.time.delay(600)
                break
    finally:
        env.close()


def main():
    ap = argparse.ArgumentParser(description="Replay a recorded PathRunnerEnv episode.")
    ap.add_argument("--seed", type=int, help="Episode seed")
    ap.add_argument("--policy", type=str, default="random",
                    help="Trace subfolder name, e.g. random / heuristic")
    ap.add_argument("--trace", type=str, default="",
                    help="Optional explicit path to a .npy action file")
    ap.add_argument("--out-dir", type=str, default=DEFAULT_OUT_DIR,
                    help="Base directory holding traces/")
    ap.add_argument("--frame-skip", type=int, default=-1,
                    help="Override frame_skip. If <0, use meta or default=4")
    ap.add_argument("--slow", action="store_true", help="Slow display (~15 fps) for readability")
    ap.add_argument("--log-level", default="WARNING")
    args = ap.parse_args()
    logging.basicConfig(level=args.log_level.upper())

    if args.trace:
        trace_path = Path(args.trace)
        if not trace_path.exists():
            raise FileNotFoundError(f"Trace file not found: {trace_path}")
    else:
        if args.seed is None:
            raise SystemExit("Please provide --seed or --trace")
        trace_path = find_trace(Path(args.out_dir), args.policy, args.seed)

    seed, actions, fs = load_trace(trace_path, args.seed, args.frame_skip)
    logger.info("Loaded %d actions from %s", len(actions), trace_path)

    print(f"Replaying seed={seed}  steps={len(actions)}  frame_skip={fs}")
    print("Controls: SPACE pause/resume | N step (when paused) | R restart | ESC quit")

    replay_episode(seed=seed, actions=actions, frame_skip=fs, slow=args.slow)


if __name__ == "__main__":
    main()
