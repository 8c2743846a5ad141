import pytest

from strafer.state import EnemySnapshot, SelfState


@pytest.fixture
def make_self():
    """Factory for SelfState with a stationary, cool, settled bot at the origin facing north."""

    def _make(**overrides) -> SelfState:
        values = dict(
            x=0.0,
            y=0.0,
            heading=0.0,
            gun_heading=0.0,
            radar_heading=0.0,
            velocity=8.0,
            elapsed_ticks=1,
            gun_turn_remaining=0.0,
            gun_heat=0.0,
        )
        values.update(overrides)
        return SelfState(**values)

    return _make


@pytest.fixture
def make_enemy():
    def _make(**overrides) -> EnemySnapshot:
        values = dict(bearing=0.0, distance=100.0, heading=0.0, velocity=0.0)
        values.update(overrides)
        return EnemySnapshot(**values)

    return _make
