import numpy as np
import pytest

from conftest import ConstantNoise, SineNoise
from terrain.density import DensityField, sample_density_field
from tools.marching_cubes import CORNER_OFFSETS
from tools.noise import OpenSimplexNoise


def test_densities_are_in_unit_range(sine_noise):
    field = sample_density_field(sine_noise, size=10, scale=4.0)
    assert field.values.shape == (1000,)
    assert field.values.min() >= 0.0
    assert field.values.max() <= 1.0


def test_noise_is_evaluated_once_per_coordinate():
    noise = SineNoise()
    sample_density_field(noise, size=6)
    assert noise.calls == 6**3


def test_density_formula_uses_scaled_position(sine_noise):
    field = sample_density_field(sine_noise, size=5, scale=4.0)
    expected = (sine_noise.sample((4.0, 8.0, 12.0)) + 1.0) / 2.0
    assert field.value_at((1, 2, 3)) == pytest.approx(expected, abs=1e-6)


@pytest.mark.parametrize("value, density", [(-1.0, 0.0), (1.0, 1.0), (0.0, 0.5), (1.5, 1.0)])
def test_constant_noise_maps_and_clamps(value, density):
    field = sample_density_field(ConstantNoise(value), size=3)
    assert np.all(field.values == np.float32(density))


def test_field_is_read_only(sine_noise):
    field = sample_density_field(sine_noise, size=4)
    with pytest.raises(ValueError):
        field.values[0] = 0.25
    with pytest.raises(ValueError):
        field.as_grid()[0, 0, 0] = 0.25


def test_grid_view_matches_linear_index(sine_noise):
    field = sample_density_field(sine_noise, size=5)
    grid = field.as_grid()
    assert grid[1, 2, 3] == field.value_at((1, 2, 3))
    assert grid[4, 0, 2] == field.value_at((4, 0, 2))


def test_corner_values_follow_canonical_order():
    size = 3
    values = np.arange(size**3, dtype=np.float32) / size**3
    field = DensityField(size=size, values=values)
    corners = field.corner_values((1, 0, 1), CORNER_OFFSETS)
    expected = [field.value_at((1 + dx, dy, 1 + dz)) for dx, dy, dz in CORNER_OFFSETS]
    assert corners == expected


def test_rejects_wrong_length():
    with pytest.raises(ValueError):
        DensityField(size=3, values=np.zeros(10, dtype=np.float32))


class _PointOnly:
    """Envuelve una fuente ocultando ``sample_grid``."""

    def __init__(self, noise):
        self.noise = noise

    def sample(self, position):
        return self.noise.sample(position)


def test_grid_path_matches_point_path():
    noise = OpenSimplexNoise(seed=6)
    batched = sample_density_field(noise, size=6, scale=4.0)
    pointwise = sample_density_field(_PointOnly(noise), size=6, scale=4.0)
    assert batched.values == pytest.approx(pointwise.values, abs=1e-6)
    assert not batched.values.flags.writeable


def test_indexer_is_set_at_construction():
    field = DensityField(size=3, values=np.zeros(27, dtype=np.float32))
    assert "indexer" in vars(field)
    assert field.indexer.size == 3
    assert field.indexer is field.indexer
