"""
Test model loading and random states
"""

import numpy as np
import pytest

from kpm_transport.core.model import (
    Model, ModelParameters, ModelError, parse_parameters, create_chain_model
)
from conftest import write_input_dir


class TestParameters:
    """para.in parsing."""

    def test_keywords_and_flags(self, tmp_path):
        p = tmp_path / 'para.in'
        p.write_text("# run\nnumber_of_moments 500\nenergy_max 4.5\n\ncalculate_msd  # flag\n")
        params = parse_parameters(p)
        assert params.number_of_moments == 500
        assert params.energy_max == 4.5
        assert params.calculate_msd and not params.calculate_vac
        assert params.number_of_random_vectors == 1
        assert params.requires_time

    def test_defaults(self, tmp_path):
        p = tmp_path / 'para.in'
        p.write_text("")
        params = parse_parameters(p)
        assert params == ModelParameters()
        assert not params.requires_time

    @pytest.mark.parametrize("text", [
        "number_of_moment 10\n",
        "number_of_moments\n",
        "number_of_moments ten\n",
        "calculate_vac yes\n",
        "number_of_moments 0\n",
        "energy_max -1\n",
    ])
    def test_rejects_bad_input(self, tmp_path, text):
        p = tmp_path / 'para.in'
        p.write_text(text)
        with pytest.raises(ModelError):
            parse_parameters(p)


class TestLoading:
    """Input directory loader."""

    def test_load(self, input_dir):
        model = Model.from_directory(input_dir)
        assert model.number_of_atoms == 4
        assert model.number_of_pairs == 8
        assert model.number_of_energy_points == 3
        assert model.number_of_steps_correlation == 2
        assert model.number_of_moments == 32
        assert model.energy_max == 3.0
        assert model.volume == 4.0
        assert model.box == 4.0
        np.testing.assert_allclose(model.hopping, -1.0)
        np.testing.assert_allclose(model.potential, 0.0)

    def test_optional_files(self, tmp_path):
        d = write_input_dir(tmp_path / 'm', "energy_max 3\n", hopping=True, potential=True)
        model = Model.from_directory(d)
        np.testing.assert_allclose(model.potential, 0.1)
        np.testing.assert_allclose(model.hopping, -1.0)
        assert model.number_of_steps_correlation == 0

    def test_minimum_image(self, input_dir):
        model = Model.from_directory(input_dir)
        xx = model.position_differences()
        np.testing.assert_allclose(np.abs(xx), 1.0)
        # first pair of atom 0 is atom 3, one step to the left through the boundary
        assert xx[0] == pytest.approx(-1.0)

    def test_missing_directory(self, tmp_path):
        with pytest.raises(ModelError):
            Model.from_directory(tmp_path / 'nope')

    def test_neighbor_count_mismatch(self, input_dir):
        (input_dir / 'neighbor.in').write_text("4 2\n2 3 1\n2 0 2\n1 1 3\n2 2 0\n")
        with pytest.raises(ModelError, match="neighbor.in"):
            Model.from_directory(input_dir)

    def test_energy_count_mismatch(self, input_dir):
        (input_dir / 'energy.in').write_text("4\n0.0\n1.0\n")
        with pytest.raises(ModelError, match="energy.in"):
            Model.from_directory(input_dir)

    def test_time_steps_required(self, input_dir):
        (input_dir / 'time_step.in').unlink()
        with pytest.raises(ModelError):
            Model.from_directory(input_dir)

    def test_dos_only_skips_time_steps(self, input_dir):
        (input_dir / 'time_step.in').unlink()
        model = Model.from_directory(input_dir, dos_only=True)
        assert not model.params.requires_time
        assert model.time_step.size == 0

    def test_bad_hopping_count(self, tmp_path):
        d = write_input_dir(tmp_path / 'm', "energy_max 3\n", hopping=True)
        (d / 'hopping.in').write_text("-1.0\n")
        with pytest.raises(ModelError, match="hopping.in"):
            Model.from_directory(d)


class TestRandomState:
    """Random-phase initial states."""

    def test_unit_modulus(self, input_dir):
        model = Model.from_directory(input_dir)
        phi = model.initialize_state()
        assert phi.shape == (4,)
        np.testing.assert_allclose(np.abs(phi), 1.0)

    def test_seed_reproducible(self):
        a = create_chain_model(10, seed=3)
        b = create_chain_model(10, seed=3)
        np.testing.assert_array_equal(a.initialize_state(), b.initialize_state())

    def test_successive_states_differ(self):
        model = create_chain_model(10, seed=3)
        assert not np.allclose(model.initialize_state(), model.initialize_state())


class TestChainFactory:

    def test_open_chain(self):
        model = create_chain_model(5, periodic=False)
        assert model.number_of_pairs == 8
        assert model.box == 0.0
        assert not model.params.requires_time

    def test_time_enables_vac_msd(self):
        model = create_chain_model(5, time_step=np.ones(3))
        assert model.params.calculate_vac and model.params.calculate_msd
        np.testing.assert_allclose(model.correlation_times, [0.0, 1.0, 2.0])

    @pytest.mark.parametrize("kwargs", [
        {'energy_max': 0.0},
        {'energy_max': -1.0},
        {'number_of_moments': 0},
        {'number_of_random_vectors': 0},
    ])
    def test_rejects_bad_parameters(self, kwargs):
        with pytest.raises(ModelError):
            create_chain_model(10, **kwargs)

    def test_rejects_empty_chain(self):
        with pytest.raises(ModelError):
            create_chain_model(0)


class TestModelIdentity:
    """Models hold arrays, so equality is identity."""

    def test_equal_to_itself(self):
        model = create_chain_model(6, seed=1)
        assert model == model

    def test_distinct_models_unequal(self):
        a = create_chain_model(6, seed=1)
        b = create_chain_model(6, seed=1)
        assert a != b
        assert len({a, b}) == 2
