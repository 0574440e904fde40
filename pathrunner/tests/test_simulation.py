# pathrunner/tests/test_simulation.py
"""Tick order, scoring, collisions and the RUNNING / PAUSED / GAME_OVER machine."""
import pytest

from pathrunner.game.config import WIDTH, HEIGHT, PLAYER_BASE_SPEED, PLAYER_SPEEDUP, MAX_DT
from pathrunner.game.entities import Obstacle, Projectile, row_band
from pathrunner.game.level import required_overlap, segment_overlap
from pathrunner.game.patterns import PathPattern
from pathrunner.game.simulation import Simulation, Status

DT = 1.0 / 60.0


def _segment_under(sim, norm_y):
    covering = [s for s in sim.state.path.segments if s.y <= norm_y <= s.bottom]
    return max(covering, key=lambda s: s.y)


def _follow(sim, steps):
    """Step while keeping the player centered on the slice it stands on."""
    for _ in range(steps):
        seg = _segment_under(sim, sim.player.norm_center[1])
        sim.player.x = seg.center_x * WIDTH
        sim.step(DT)
    return sim.status


def _obstacle_on_player(sim, color):
    cx, cy = sim.player.norm_center
    return Obstacle(x=cx - 0.01, y=cy - 0.01, width=0.02, height=0.02,
                    color=color, row=row_band(cy), id=501)


def _projectile_on_player(sim):
    cx, cy = sim.player.norm_center
    size = 15 / WIDTH
    return Projectile(x=cx - size / 2, y=cy - size / 2, width=size, height=size,
                      speed=0.0, id=777)


def _move_player_to(sim, norm_y):
    seg = _segment_under(sim, norm_y)
    sim.player.y = norm_y * HEIGHT
    sim.player.x = seg.center_x * WIDTH


class TestStart:
    def test_fresh_session(self):
        sim = Simulation(seed=7)
        assert sim.status is Status.RUNNING
        assert sim.score == 0
        assert sim.difficulty_level == 1
        assert sim.pattern is PathPattern.RANDOM
        assert sim.player.speed == PLAYER_BASE_SPEED
        assert sim.state.path.is_on_path(sim.player.norm_center, sim.player.norm_radius)

    def test_score_counts_surviving_ticks(self):
        sim = Simulation(seed=7)
        assert _follow(sim, 10) is Status.RUNNING
        assert sim.score == 10

    def test_standing_still_survives_first_ticks(self):
        sim = Simulation(seed=11)
        for _ in range(10):
            assert sim.step(DT) is Status.RUNNING

    def test_dt_is_clamped(self):
        sim = Simulation(seed=7)
        sim.step(1.0)
        assert sim.state.queue.now == pytest.approx(MAX_DT)
        sim.step(-1.0)
        assert sim.state.queue.now == pytest.approx(MAX_DT)
        assert sim.score == 2

    def test_speedup_every_hundred_points(self):
        sim = Simulation(seed=3)
        _follow(sim, 99)
        assert sim.player.speed == PLAYER_BASE_SPEED
        _follow(sim, 1)
        assert sim.score == 100
        assert sim.player.speed == pytest.approx(PLAYER_BASE_SPEED + PLAYER_SPEEDUP)

    def test_same_seed_same_session(self):
        a, b = Simulation(seed=42), Simulation(seed=42)
        _follow(a, 150)
        _follow(b, 150)
        assert a.frame() == b.frame()

    def test_frame_is_a_copy(self):
        sim = Simulation(seed=7)
        f = sim.frame()
        f.player.x = -5.0
        f.segments[0].x = -5.0
        assert sim.player.x != -5.0
        assert sim.state.path.segments[0].x != -5.0


class TestCollisions:
    def test_matching_obstacle_is_collected(self):
        sim = Simulation(seed=7)
        sim.state.spawner.obstacles.append(_obstacle_on_player(sim, sim.player.color))
        cause = sim.resolve_collisions(sim.player.norm_center, sim.player.norm_radius)
        assert cause is None
        assert sim.score == 50
        assert sim.state.spawner.obstacles == []

    def test_matching_obstacle_in_a_full_tick(self):
        sim = Simulation(seed=7)
        sim.state.spawner.obstacles.append(_obstacle_on_player(sim, sim.player.color))
        assert sim.step(DT) is Status.RUNNING
        assert sim.score == 51
        assert sim.state.spawner.obstacles == []

    def test_mismatched_obstacle_ends_the_game(self):
        sim = Simulation(seed=7)
        _follow(sim, 5)
        sim.state.spawner.obstacles.append(_obstacle_on_player(sim, sim.player.color.toggled()))
        assert sim.step(DT) is Status.GAME_OVER
        assert sim.score == 5
        assert sim.state.death_cause == "obstacle"
        events = sim.drain_events()
        assert [e.kind for e in events] == ["game_over"]
        assert events[0].cause == "obstacle" and events[0].score == 5

    def test_toggle_makes_the_obstacle_safe(self):
        sim = Simulation(seed=7)
        sim.state.spawner.obstacles.append(_obstacle_on_player(sim, sim.player.color.toggled()))
        sim.toggle_color()
        assert sim.step(DT) is Status.RUNNING
        assert sim.score == 51

    def test_projectile_hit(self):
        sim = Simulation(seed=7)
        _move_player_to(sim, 0.5)
        sim.state.spawner.projectiles.append(_projectile_on_player(sim))
        assert sim.step(DT) is Status.GAME_OVER
        assert sim.state.death_cause == "projectile"
        assert sim.score == 0

    def test_projectile_below_pass_line_is_harmless(self):
        sim = Simulation(seed=7)
        sim.state.spawner.projectiles.append(_projectile_on_player(sim))
        assert sim.step(DT) is Status.RUNNING
        assert sim.state.spawner.projectiles[0].passed_player

    def test_leaving_the_path_ends_the_game(self):
        sim = Simulation(seed=7)
        seg = _segment_under(sim, sim.player.norm_center[1])
        sim.player.x = (seg.right + 0.2) * WIDTH if seg.right < 0.7 else (seg.x - 0.2) * WIDTH
        if sim.state.path.is_on_path(sim.player.norm_center, sim.player.norm_radius):
            pytest.skip("neighbouring slice still under the player")
        assert sim.step(DT) is Status.GAME_OVER
        assert sim.state.death_cause == "off_path"

    def test_game_over_freezes_everything(self):
        sim = Simulation(seed=7)
        sim.state.spawner.obstacles.append(_obstacle_on_player(sim, sim.player.color.toggled()))
        sim.step(DT)
        frozen = sim.frame()
        for _ in range(10):
            assert sim.step(DT) is Status.GAME_OVER
        assert sim.frame() == frozen
        assert not sim.pause()
        assert not sim.resume()


class TestPauseResume:
    def test_illegal_transitions_are_no_ops(self):
        sim = Simulation(seed=7)
        assert not sim.resume()
        assert sim.pause()
        assert not sim.pause()
        assert sim.resume()
        assert sim.status is Status.RUNNING

    def test_input_ignored_while_paused(self):
        sim = Simulation(seed=7)
        sim.set_direction(1, 0)
        sim.pause()
        assert sim.player.dir_x == 0.0
        sim.set_direction(-1, -1)
        color = sim.player.color
        sim.toggle_color()
        assert (sim.player.dir_x, sim.player.dir_y) == (0.0, 0.0)
        assert sim.player.color is color

    def test_pause_freezes_state(self):
        sim = Simulation(seed=7)
        _follow(sim, 20)
        sim.pause()
        before = sim.frame()
        for _ in range(100):
            assert sim.step(DT) is Status.PAUSED
        after = sim.frame()
        assert after.score == before.score
        assert after.segments == before.segments

    def test_pause_suspends_timed_effects(self):
        sim = Simulation(seed=7)
        sim.state.path.switch_pattern()
        warning = sim.state.spawner.spawn_projectile(300, 1, 0.5)
        assert warning is not None
        label = sim.frame().banner
        assert label is not None

        _follow(sim, 30)                   # half a second of game time
        sim.pause()
        now = sim.state.queue.now
        for _ in range(600):
            sim.step(DT)
        assert sim.state.queue.now == now
        assert sim.frame().banner == label
        assert sim.state.spawner.warnings == [warning]

        sim.resume()
        _follow(sim, 40)                   # past the 1 s warning
        assert sim.state.spawner.warnings == []
        _follow(sim, 70)                   # past the 2 s banner
        assert sim.frame().banner is None

    def test_direction_is_clamped(self):
        sim = Simulation(seed=7)
        sim.set_direction(3, -2)
        assert (sim.player.dir_x, sim.player.dir_y) == (1.0, -1.0)


class TestRestart:
    def _assert_fresh(self, sim):
        assert sim.status is Status.RUNNING
        assert sim.score == 0
        assert sim.difficulty_level == 1
        assert sim.pattern is PathPattern.RANDOM
        assert sim.state.spawner.obstacles == []
        assert sim.state.spawner.warnings == []
        assert sim.state.spawner.projectiles == []
        assert len(sim.state.queue) == 0
        assert len(sim.state.path.segments) == 7
        segs = sim.state.path.segments
        for a, b in zip(segs, segs[1:]):
            assert segment_overlap(a, b) >= required_overlap(a.width, b.width) - 1e-9
        assert sim.state.path.is_on_path(sim.player.norm_center, sim.player.norm_radius)

    def test_restart_after_game_over(self):
        sim = Simulation(seed=7)
        sim.state.spawner.spawn_projectile(300, 1, 0.5)
        sim.state.spawner.obstacles.append(_obstacle_on_player(sim, sim.player.color.toggled()))
        sim.step(DT)
        assert sim.status is Status.GAME_OVER
        sim.restart(seed=7)
        self._assert_fresh(sim)
        assert sim.seed == 7

    def test_restart_while_paused(self):
        sim = Simulation(seed=9)
        sim.state.path.switch_pattern()
        _follow(sim, 20)
        sim.pause()
        sim.restart()
        self._assert_fresh(sim)
        assert sim.seed is not None
        assert sim.frame().banner is None

    def test_restart_with_same_seed_replays(self):
        sim = Simulation(seed=13)
        _follow(sim, 50)
        first = sim.frame()
        sim.restart(seed=13)
        _follow(sim, 50)
        assert sim.frame() == first


class TestPatternEvents:
    def test_switch_is_announced(self):
        sim = Simulation(seed=7)
        new = sim.state.path.switch_pattern()
        events = sim.drain_events()
        assert [e.kind for e in events] == ["pattern_change"]
        assert events[0].pattern is new is sim.pattern
        assert sim.frame().banner == new.label
        assert sim.drain_events() == []

    def test_banner_clears_after_two_seconds(self):
        sim = Simulation(seed=7)
        sim.state.path.switch_pattern()
        sim.state.queue.advance(1.5)
        assert sim.frame().banner is not None
        sim.state.queue.advance(0.5)
        assert sim.frame().banner is None

    def test_new_switch_restarts_the_banner_clock(self):
        sim = Simulation(seed=7)
        sim.state.path.switch_pattern()
        sim.state.queue.advance(1.5)
        second = sim.state.path.switch_pattern()
        sim.state.queue.advance(1.0)
        assert sim.frame().banner == second.label
        sim.state.queue.advance(1.0)
        assert sim.frame().banner is None

    def test_switch_happens_while_playing(self):
        sim = Simulation(seed=5)
        sim.state.score = 600
        sim.state.path.set_progress(600)
        sim.state.path.extend_above(1)
        assert any(e.kind == "pattern_change" for e in sim.drain_events())
