# pathrunner/tests/test_path_env.py
"""
Quick tests for PathRunnerEnv (Gymnasium environment).

Usage (from repo root):
  python -m pytest pathrunner/tests/test_path_env.py
  python -m pathrunner.tests.test_path_env
  python -m pathrunner.tests.test_path_env --render
  python -m pathrunner.tests.test_path_env --no-api-check --no-determinism
"""

from __future__ import annotations
import argparse
import sys
from typing import List, Tuple

import numpy as np
from gymnasium.utils.env_checker import check_env

from pathrunner.env.path_env import PathRunnerEnv, ACTION_TOGGLE_COLOR
from pathrunner.env.observations import OBS_SIZE
from pathrunner.game.config import WIDTH


def test_api(frame_skip: int = 4) -> None:
    """Verify Gym API contract (spaces, step/reset signatures, types)."""
    env = PathRunnerEnv(frame_skip=frame_skip)
    try:
        check_env(env.unwrapped, skip_render_check=True)
    finally:
        env.close()
    print("✓ API check ok")


def test_smoke(steps: int = 300, seed: int = 123, frame_skip: int = 4) -> None:
    """Short random rollout: no crashes, obs in space, reward type, proper terminations."""
    env = PathRunnerEnv(frame_skip=frame_skip)
    env.action_space.seed(seed)
    try:
        obs, info = env.reset(seed=seed)
        assert obs.shape == (OBS_SIZE,)
        assert env.observation_space.contains(obs), "Initial observation not in space"
        assert info["seed"] == seed

        for t in range(steps):
            a = env.action_space.sample()
            obs, r, term, trunc, info = env.step(a)
            assert isinstance(r, float), "Reward must be a float"
            assert env.observation_space.contains(obs), f"Step {t}: observation out of bounds"
            if term:
                assert r == -1.0
                assert info["death_cause"] in ("off_path", "obstacle", "projectile")
                break
            assert r == 1.0
            if trunc:
                break
    finally:
        env.close()
    print("✓ Smoke test ok")


def test_determinism(steps: int = 300, seed: int = 123, frame_skip: int = 4) -> None:
    """Same seed + same action sequence => identical obs/reward/terminal flags."""
    def rollout(seed_val: int, action_seq: List[int]) -> List[Tuple[np.ndarray, float, bool, bool]]:
        env = PathRunnerEnv(frame_skip=frame_skip)
        traj: List[Tuple[np.ndarray, float, bool, bool]] = []
        try:
            obs, _ = env.reset(seed=seed_val)
            for a in action_seq:
                obs, r, term, trunc, _ = env.step(int(a))
                traj.append((obs.copy(), float(r), bool(term), bool(trunc)))
                if term or trunc:
                    break
        finally:
            env.close()
        return traj

    # Fixed action sequence using a local RNG (not numpy global)
    rng = np.random.RandomState(42)
    action_seq = [int(rng.randint(0, 6)) for _ in range(steps)]

    t1 = rollout(seed, action_seq)
    t2 = rollout(seed, action_seq)

    assert len(t1) == len(t2), "Determinism: trajectory length mismatch"
    for i, ((o1, r1, te1, tr1), (o2, r2, te2, tr2)) in enumerate(zip(t1, t2)):
        if not np.allclose(o1, o2):
            raise AssertionError(f"Determinism: obs mismatch at step {i}")
        if not (r1 == r2 and te1 == te2 and tr1 == tr2):
            raise AssertionError(f"Determinism: transition mismatch at step {i}")

    print("✓ Determinism ok")


def test_time_limit_truncates() -> None:
    # 0.25 s at 60 Hz, one frame per decision -> 15 decisions
    env = PathRunnerEnv(frame_skip=1, time_limit_seconds=0.25)
    try:
        env.reset(seed=5)
        truncated = False
        for t in range(15):
            env.unwrapped.sim.player.x = _centered_x(env)
            _, _, term, truncated, _ = env.step(0)
            assert not term
        assert truncated and t == 14
    finally:
        env.close()
    print("✓ Time limit ok")


def test_toggle_action_flips_color_feature(seed: int = 9) -> None:
    env = PathRunnerEnv()
    try:
        obs, _ = env.reset(seed=seed)
        assert obs[2] == 0.0
        obs, _, term, _, _ = env.step(ACTION_TOGGLE_COLOR)
        assert not term
        assert obs[2] == 1.0
    finally:
        env.close()
    print("✓ Toggle action ok")


def test_unseeded_reset_reports_its_seed() -> None:
    env = PathRunnerEnv()
    try:
        _, info = env.reset()
        assert isinstance(info["seed"], int)
    finally:
        env.close()


def _centered_x(env) -> float:
    sim = env.unwrapped.sim
    py = sim.player.norm_center[1]
    seg = max((s for s in sim.state.path.segments if s.y <= py <= s.bottom), key=lambda s: s.y)
    return seg.center_x * WIDTH


def render_demo(steps: int, seed: int, frame_skip: int) -> None:
    """Open a window and run a short NOOP demo so you can visually verify behavior."""
    env = PathRunnerEnv(render_mode="human", frame_skip=frame_skip)
    try:
        obs, info = env.reset(seed=seed)
        for _ in range(steps):
            # NOOP to just watch scrolling and the path drifting away
            obs, r, term, trunc, info = env.step(0)
            if term or trunc:
                break
    finally:
        env.close()
    print("✓ Render demo finished")


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--seed", type=int, default=123, help="Episode seed for tests")
    ap.add_argument("--steps", type=int, default=300, help="Max decision steps per test")
    ap.add_argument("--frame-skip", type=int, default=4, help="Sim frames per decision step")
    ap.add_argument("--render", action="store_true", help="Run a short visual demo")
    ap.add_argument("--no-api-check", action="store_true", help="Skip Gym API compliance check")
    ap.add_argument("--no-smoke", action="store_true", help="Skip smoke test")
    ap.add_argument("--no-determinism", action="store_true", help="Skip determinism test")
    args = ap.parse_args()

    try:
        if not args.no_api_check:
            test_api(frame_skip=args.frame_skip)
        if not args.no_smoke:
            test_smoke(steps=args.steps, seed=args.seed, frame_skip=args.frame_skip)
        if not args.no_determinism:
            test_determinism(steps=args.steps, seed=args.seed, frame_skip=args.frame_skip)
        if args.render:
            render_demo(steps=min(args.steps, 600), seed=args.seed, frame_skip=args.frame_skip)
    except AssertionError as e:
        print(f"✗ Test failed: {e}", file=sys.stderr)
        sys.exit(1)
    else:
        print("🎉 All selected tests passed")


if __name__ == "__main__":
    main()
