import math

import pytest

from strafer.config import GunnerySettings
from strafer.gunnery import FiringSolutionSolver


@pytest.fixture
def solver():
    return FiringSolutionSolver()


def test_stationary_target_dead_ahead(solver, make_self, make_enemy):
    solution = solver.solve(make_self(), make_enemy(bearing=0.0, distance=100.0, heading=0.0, velocity=0.0))

    assert solution.gun_turn == pytest.approx(0.0, abs=1e-9)
    assert solution.power == pytest.approx(3.0)
    assert solution.fire is True
    assert (solution.predicted_x, solution.predicted_y) == pytest.approx((0.0, 100.0))


def test_stationary_target_with_rotated_body_and_gun(solver, make_self, make_enemy):
    me = make_self(x=50.0, y=-20.0, heading=30.0, gun_heading=30.0)
    solution = solver.solve(me, make_enemy(bearing=0.0, distance=100.0))
    assert solution.gun_turn == pytest.approx(0.0, abs=1e-9)


@pytest.mark.parametrize("distance,power", [(50.0, 3.0), (100.0, 3.0), (400.0 / 3.0, 3.0), (200.0, 2.0), (800.0, 0.5)])
def test_power_scales_inversely_with_distance(solver, distance, power):
    assert solver.power(distance) == pytest.approx(power)


@pytest.mark.parametrize("remaining,speed", [(0.0, 20.0), (1.0, 17.0), (-2.0, 14.0), (3.0, 11.0), (45.0, 11.0)])
def test_bullet_speed_derated_by_pending_gun_turn(solver, make_self, remaining, speed):
    assert solver.bullet_speed(make_self(gun_turn_remaining=remaining)) == pytest.approx(speed)


def test_no_fire_while_gun_is_hot(solver, make_self, make_enemy):
    solution = solver.solve(make_self(gun_heat=0.1), make_enemy())
    assert solution.fire is False
    assert solution.gun_turn == pytest.approx(0.0, abs=1e-9)


@pytest.mark.parametrize("remaining", [10.0, -10.0, 25.0])
def test_no_fire_while_gun_still_turning(solver, make_self, make_enemy, remaining):
    assert solver.solve(make_self(gun_turn_remaining=remaining), make_enemy()).fire is False


def test_fires_when_nearly_settled(solver, make_self, make_enemy):
    assert solver.solve(make_self(gun_turn_remaining=-9.9), make_enemy()).fire is True


def test_leads_a_crossing_target(solver, make_self, make_enemy):
    enemy = make_enemy(bearing=45.0, distance=150.0, heading=90.0, velocity=8.0)

    solution = solver.solve(make_self(), enemy)

    current = 150.0 * math.sin(math.radians(45.0))
    # Bullet speed 20, so 7.5 ticks of travel at 8 per tick towards the east.
    assert solution.time_to_impact == pytest.approx(7.5)
    assert solution.predicted_x == pytest.approx(current + 60.0)
    assert solution.predicted_y == pytest.approx(current)
    expected = math.degrees(math.atan2(current + 60.0, current))
    assert solution.gun_turn == pytest.approx(expected)
    # Aimed at the projected point, ahead of the enemy's current bearing.
    assert solution.gun_turn > 45.0


def test_lead_sign_follows_target_motion(solver, make_self, make_enemy):
    # Enemy straight ahead running west: the gun must turn left.
    solution = solver.solve(make_self(), make_enemy(bearing=0.0, distance=200.0, heading=270.0, velocity=8.0))
    assert solution.gun_turn < 0.0


def test_gun_turn_wraps_across_north(solver, make_self, make_enemy):
    solution = solver.solve(make_self(gun_heading=350.0), make_enemy(bearing=0.0))
    assert solution.gun_turn == pytest.approx(10.0)


def test_tiny_distance_stays_finite(solver, make_self, make_enemy):
    solution = solver.solve(make_self(), make_enemy(distance=1.0, velocity=8.0, heading=90.0))
    assert solution.power == pytest.approx(3.0)
    assert math.isfinite(solution.gun_turn)


def test_settings_are_tunable(make_self, make_enemy):
    solver = FiringSolutionSolver(GunnerySettings(power_numerator=200.0, max_power=2.0, fire_alignment_degrees=20.0))
    solution = solver.solve(make_self(gun_turn_remaining=15.0), make_enemy(distance=200.0))
    assert solution.power == pytest.approx(1.0)
    assert solution.fire is True
