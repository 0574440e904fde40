# pathrunner/env/path_env.py
from __future__ import annotations
from typing import Optional, Dict, Any
import numpy as np
import gymnasium as gym
import pygame

from pathrunner.game.config import WIDTH, HEIGHT, FPS
from pathrunner.game.game import draw_frame
from pathrunner.game.simulation import Simulation, Status
from pathrunner.env.observations import build_observation, observation_bounds

# action -> direction vector (5 = toggle color, direction released)
ACTION_DIRECTIONS = {
    0: (0.0, 0.0),
    1: (-1.0, 0.0),
    2: (1.0, 0.0),
    3: (0.0, -1.0),
    4: (0.0, 1.0),
    5: (0.0, 0.0),
}
ACTION_TOGGLE_COLOR = 5


class PathRunnerEnv(gym.Env):
    """
    Path Runner Gymnasium environment (vector observations).
    - Simulation at 60 Hz (internal).
    - Agent acts every `frame_skip` frames (default 4) -> 15 decisions/sec.
    - Actions: 0 NOOP, 1 LEFT, 2 RIGHT, 3 UP, 4 DOWN, 5 TOGGLE COLOR.
    - Observation: shape (18,), float32 (see observations.build_observation).
    """
    metadata = {"render_modes": ["human", "rgb_array"], "render_fps": FPS}

    def __init__(self,
                 render_mode: Optional[str] = None,
                 frame_skip: int = 4,
                 time_limit_seconds: Optional[float] = 60.0):
        super().__init__()
        assert frame_skip >= 1, "frame_skip must be >= 1"
        assert render_mode is None or render_mode in self.metadata["render_modes"]
        self.render_mode = render_mode
        self.frame_skip = int(frame_skip)

        self.sim_fps = FPS
        self.dt = 1.0 / self.sim_fps

        self.time_limit_decisions = None
        if time_limit_seconds is not None:
            self.time_limit_decisions = int(self.sim_fps * time_limit_seconds / self.frame_skip)

        self.action_space = gym.spaces.Discrete(len(ACTION_DIRECTIONS))
        low, high = observation_bounds()
        self.observation_space = gym.spaces.Box(low=low, high=high, dtype=np.float32)

        self.sim: Optional[Simulation] = None
        self.timestep: int = 0
        self.current_seed: Optional[int] = None

        self.screen = None
        self.clock = None

    # -------------------- Core API --------------------

    def reset(self, *, seed: Optional[int] = None, options: Optional[Dict[str, Any]] = None):
        super().reset(seed=seed)  # initializes self.np_random

        # Seeding policy:
        # - If a seed is provided, use it directly for the path for strict reproducibility.
        # - If not, let the simulation draw one (reported back in info["seed"]).
        path_seed = int(seed) if seed is not None else None

        self.sim = Simulation(path_seed)
        self.current_seed = self.sim.seed
        self.timestep = 0

        obs = self._get_obs()
        info = {"seed": self.current_seed, "score": 0}
        if self.render_mode == "human":
            self.render()
        return obs, info

    def step(self, action: int):
        assert self.action_space.contains(action), f"Invalid action {action}"
        assert self.sim is not None, "Call reset() before step()"
        action = int(action)

        self.sim.set_direction(*ACTION_DIRECTIONS[action])
        if action == ACTION_TOGGLE_COLOR:
            self.sim.toggle_color()

        for _ in range(self.frame_skip):
            if self.sim.step(self.dt) is Status.GAME_OVER:
                break

        alive = self.sim.status is Status.RUNNING
        reward = 1.0 if alive else -1.0

        self.timestep += 1
        terminated = not alive
        truncated = False
        if (self.time_limit_decisions is not None) and (self.timestep >= self.time_limit_decisions):
            truncated = True

        obs = self._get_obs()
        info = {
            "score": self.sim.score,
            "timestep": self.timestep,
            "seed": self.current_seed,
            "pattern": self.sim.pattern.value,
            "difficulty": self.sim.difficulty_level,
            "death_cause": self.sim.state.death_cause,
        }

        if self.render_mode == "human":
            self.render()

        return obs, reward, terminated, truncated, info

    # -------------------- Helpers --------------------

    def _get_obs(self) -> np.ndarray:
        assert self.sim is not None
        return build_observation(self.sim.frame())

    # -------------------- Rendering --------------------

    def render(self):
        if self.render_mode is None or self.sim is None:
            return None

        if self.screen is None:
            pygame.init()
            if self.render_mode == "human":
                self.screen = pygame.display.set_mode((WIDTH, HEIGHT))
                pygame.display.set_caption("Path Runner - Gym Env")
                self.clock = pygame.time.Clock()
            else:
                self.screen = pygame.Surface((WIDTH, HEIGHT))

        draw_frame(self.screen, self.sim.frame())

        if self.render_mode == "human":
            # Pump minimal event queue so the OS doesn't think we're hung
            pygame.event.pump()
            pygame.display.flip()
            if self.clock is not None:
                self.clock.tick(self.metadata.get("render_fps", FPS))
            return None

        # (H, W, 3) uint8 array
        arr = pygame.surfarray.array3d(self.screen)  # (W, H, 3)
        return np.transpose(arr, (1, 0, 2))

    def close(self):
        if self.screen is not None:
            if self.render_mode == "human":
                pygame.display.quit()
            pygame.quit()
            self.screen = None
            self.clock = None
