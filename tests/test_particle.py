import numpy as np
import pytest

from constants import LIFE_SPAN_MAX, LIFE_SPAN_MIN
from particle import Particle, ParticleSystem

from conftest import HEIGHT, PALETTE, WIDTH


def test_new_system_is_empty(particles):
    assert len(particles) == 0
    assert particles.positions.shape == (0, 2)
    assert particles.render_radii().shape == (0,)


def test_spawn_initial_state(particles):
    particles.spawn(500, WIDTH, HEIGHT, PALETTE)
    assert len(particles) == 500
    assert np.all(particles.positions[:, 0] >= 0) and np.all(particles.positions[:, 0] < WIDTH)
    assert np.all(particles.positions[:, 1] >= 0) and np.all(particles.positions[:, 1] < HEIGHT)
    assert np.all(particles.velocities == 0)
    assert set(particles.colors.tolist()) <= set(PALETTE)
    assert np.all(particles.ages == 0)
    assert np.all(particles.life_spans >= LIFE_SPAN_MIN)
    assert np.all(particles.life_spans < LIFE_SPAN_MAX)


def test_spawn_rejects_empty_palette(particles):
    with pytest.raises(ValueError):
        particles.spawn(3, WIDTH, HEIGHT, [])


def test_particle_snapshot(particles):
    particles.spawn(2, WIDTH, HEIGHT, ["#ffffff"])
    particles.velocities[1] = (1.5, -2.0)
    snapshot = particles.particle(1)
    assert isinstance(snapshot, Particle)
    assert (snapshot.vx, snapshot.vy) == (1.5, -2.0)
    assert snapshot.color == "#ffffff"
    assert snapshot.age == 0
    assert len(particles.as_list()) == 2


def test_respawn_keeps_velocity_and_color(particles):
    particles.spawn(10, WIDTH, HEIGHT, PALETTE)
    particles.velocities[:] = 3.0
    particles.ages[:] = 42
    colors = particles.colors.copy()

    particles.respawn([2, 5], 100, 50)

    assert particles.ages[2] == 0 and particles.ages[5] == 0
    assert particles.ages[0] == 42
    assert np.all(particles.velocities == 3.0)
    assert np.array_equal(particles.colors, colors)
    for i in (2, 5):
        assert 0 <= particles.positions[i, 0] < 100
        assert 0 <= particles.positions[i, 1] < 50


def test_respawn_accepts_mask_and_single_index(particles):
    particles.spawn(4, WIDTH, HEIGHT, PALETTE)
    particles.ages[:] = 9
    particles.respawn(np.array([True, False, False, False]), WIDTH, HEIGHT)
    particles.respawn(3, WIDTH, HEIGHT)
    assert particles.ages.tolist() == [0, 9, 9, 0]


def test_resize_grows_population(particles):
    particles.resize_population(120, WIDTH, HEIGHT, PALETTE)
    assert len(particles) == 120
    assert len(particles.velocities) == len(particles.colors) == len(particles.ages) == 120


def test_resize_is_idempotent(particles):
    particles.resize_population(80, WIDTH, HEIGHT, PALETTE)
    positions = particles.positions.copy()
    particles.resize_population(80, WIDTH, HEIGHT, PALETTE)
    assert len(particles) == 80
    assert np.array_equal(particles.positions, positions)


def test_resize_truncates_from_the_tail(particles):
    particles.resize_population(3000, WIDTH, HEIGHT, PALETTE)
    head = particles.positions[:100].copy()
    particles.resize_population(100, WIDTH, HEIGHT, PALETTE)
    assert len(particles) == 100
    assert np.array_equal(particles.positions, head)


@pytest.mark.parametrize("target", [0, -5])
def test_resize_to_zero_or_below_empties(particles, target):
    particles.resize_population(10, WIDTH, HEIGHT, PALETTE)
    particles.resize_population(target, WIDTH, HEIGHT, PALETTE)
    assert len(particles) == 0


def test_recolor_with_same_palette_changes_nothing(particles):
    particles.spawn(200, WIDTH, HEIGHT, PALETTE)
    colors = particles.colors.copy()
    assert particles.recolor_if_palette_changed(list(PALETTE)) == 0
    assert np.array_equal(particles.colors, colors)


def test_recolor_only_touches_stale_colors(particles):
    particles.spawn(300, WIDTH, HEIGHT, PALETTE)
    before = particles.colors.copy()
    new_palette = [PALETTE[0], "#000000"]

    changed = particles.recolor_if_palette_changed(new_palette)

    kept = before == PALETTE[0]
    assert changed == int((~kept).sum())
    assert np.all(particles.colors[kept] == PALETTE[0])
    assert set(particles.colors.tolist()) <= set(new_palette)


def test_recolor_with_longer_color_names(particles):
    particles.spawn(5, WIDTH, HEIGHT, ["#fff"])
    particles.recolor_if_palette_changed(["#ffffffff"])
    assert particles.colors.tolist() == ["#ffffffff"] * 5


def test_recolor_rejects_empty_palette(particles):
    particles.spawn(1, WIDTH, HEIGHT, PALETTE)
    with pytest.raises(ValueError):
        particles.recolor_if_palette_changed([])


def test_reset_keeps_count_within_new_bounds(particles):
    particles.spawn(50, WIDTH, HEIGHT, PALETTE)
    particles.velocities[:] = 1.0
    particles.reset(40, 30, PALETTE)
    assert len(particles) == 50
    assert np.all(particles.positions < [40, 30])
    assert np.all(particles.velocities == 0)


def test_render_radii_follow_speed_with_clamp(particles):
    particles.spawn(4, WIDTH, HEIGHT, PALETTE)
    particles.velocities[:] = [(0, 0), (4, 0), (0, -3), (30, 40)]
    assert particles.render_radii().tolist() == pytest.approx([1.0, 2.0, 1.5, 3.0])


def test_seeded_systems_spawn_identically():
    a = ParticleSystem(rng=5)
    b = ParticleSystem(rng=5)
    a.spawn(10, WIDTH, HEIGHT, PALETTE)
    b.spawn(10, WIDTH, HEIGHT, PALETTE)
    assert np.array_equal(a.positions, b.positions)
    assert np.array_equal(a.colors, b.colors)
