import itertools

import numpy as np
import pytest

from tools.noise import OpenSimplexNoise


def test_samples_stay_in_range():
    noise = OpenSimplexNoise(seed=5)
    for position in itertools.product([0.0, 3.7, 20.0, 101.5], repeat=3):
        assert -1.0 <= noise.sample(position) <= 1.0


def test_same_seed_is_deterministic():
    a = OpenSimplexNoise(seed=42)
    b = OpenSimplexNoise(seed=42)
    for position in [(1.0, 2.0, 3.0), (40.0, 8.0, 12.0)]:
        assert a.sample(position) == b.sample(position)


def test_seed_changes_field():
    positions = [(float(i) * 4.0, 8.0, 12.0) for i in range(1, 20)]
    a = [OpenSimplexNoise(seed=1).sample(p) for p in positions]
    b = [OpenSimplexNoise(seed=2).sample(p) for p in positions]
    assert a != b


def test_single_octave_matches_raw_simplex():
    from opensimplex import OpenSimplex

    noise = OpenSimplexNoise(seed=9, period=10.0, octaves=1)
    expected = OpenSimplex(seed=9).noise3(1.2, 0.4, 3.3)
    assert noise.sample((12.0, 4.0, 33.0)) == pytest.approx(expected)


@pytest.mark.parametrize("kwargs", [{"period": 0.0}, {"octaves": 0}])
def test_invalid_parameters(kwargs):
    with pytest.raises(ValueError):
        OpenSimplexNoise(**kwargs)


def test_grid_sampling_matches_point_sampling():
    noise = OpenSimplexNoise(seed=4)
    xs = np.array([0.0, 4.0, 8.0, 12.0])
    ys = np.array([0.0, 4.0, 8.0])
    zs = np.array([0.0, 4.0, 8.0, 12.0, 16.0])

    grid = noise.sample_grid(xs, ys, zs)

    assert grid.shape == (4, 3, 5)
    for i, x in enumerate(xs):
        for j, y in enumerate(ys):
            for k, z in enumerate(zs):
                assert grid[i, j, k] == pytest.approx(noise.sample((x, y, z)), abs=1e-7)
