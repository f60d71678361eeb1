import numpy as np
import pytest

from rocketfx.bursts import BurstManager
from rocketfx.projectiles import ProjectileSimulator
from rocketfx.scene import KIND_BURST, KIND_PROJECTILE, KIND_TRAIL


@pytest.fixture
def bursts(sink):
    return BurstManager(sink, rng=np.random.default_rng(0))


@pytest.fixture
def simulator(sink, bursts):
    return ProjectileSimulator(sink, bursts)


def ticks_until_exit(simulator, limit=1000):
    for n in range(1, limit):
        simulator.tick()
        if not simulator.projectiles:
            return n
    raise AssertionError("projectile never left the box")


def test_launch_spawns_body(simulator, sink):
    projectile = simulator.launch((10, 20, 5), (1, 2, 3))
    assert len(simulator) == 1
    assert list(projectile.position) == [10, 20, 0]
    assert list(projectile.velocity) == [1, 2, 0]
    assert len(projectile.trail) == 0
    assert len(sink.live(KIND_PROJECTILE)) == 1


def test_position_integrates_with_fixed_dt(simulator):
    projectile = simulator.launch((0, 0), (100, -50))
    for _ in range(10):
        simulator.tick()
    assert projectile.position == pytest.approx([16.0, -8.0, 0.0])


@pytest.mark.parametrize("velocity, expected_ticks", [
    ((1100, 0), 19),     # 17.6 per tick, passes 320 on tick 19
    ((-1100, 0), 19),
    ((0, -520), 29),     # 8.32 per tick, passes 240 on tick 29
    ((300, 400), 38),    # y reaches 243.2 on tick 38 while x is 182.4
])
def test_exits_at_predicted_tick(simulator, bursts, sink, velocity, expected_ticks):
    simulator.launch((0, 0), velocity)
    assert ticks_until_exit(simulator) == expected_ticks

    assert len(bursts) == 1
    exit_position = np.array(velocity) * 0.016 * expected_ticks
    burst = bursts.bursts[0]
    assert burst.tick_count == 0
    assert np.allclose(burst.positions[:, :2], exit_position)

    assert sink.live(KIND_PROJECTILE) == []
    assert sink.live(KIND_TRAIL) == []
    assert len(sink.live(KIND_BURST)) == 1


def test_trail_keeps_last_forty_positions(simulator):
    projectile = simulator.launch((0, 0), (10, 0))
    for n in range(1, 101):
        simulator.tick()
        assert 0 < len(projectile.trail) <= 40
        assert len(projectile.trail) == min(n, 40)

    xs = [point[0] for point in projectile.trail]
    assert xs == pytest.approx([10 * 0.016 * n for n in range(61, 101)])


def test_single_trail_line_rebuilt_each_tick(simulator, sink):
    simulator.launch((0, 0), (10, 0))
    simulator.tick()
    assert sink.live(KIND_TRAIL) == []

    for _ in range(5):
        simulator.tick()
        trails = sink.live(KIND_TRAIL)
        assert len(trails) == 1

    removed = [c for c in sink.commands if c["type"] == "remove" and c["kind"] == KIND_TRAIL]
    assert len(removed) == 4


def test_exits_are_removed_without_skipping_neighbours(simulator, bursts):
    slow = simulator.launch((0, 0), (10, 0))
    simulator.launch((315, 0), (1000, 0))
    simulator.launch((0, 235), (0, 1000))
    other_slow = simulator.launch((0, 0), (-10, 0))

    simulator.tick()

    assert simulator.projectiles == [slow, other_slow]
    assert len(bursts) == 2
    assert len(slow.trail) == 1
    assert len(other_slow.trail) == 1


def test_close_releases_everything(simulator, sink):
    for i in range(3):
        simulator.launch((0, 0), (i * 10, 5))
    for _ in range(3):
        simulator.tick()
    simulator.close()
    simulator.close()
    assert len(simulator) == 0
    assert sink.objects == {}
