"""
Tests for NetworkModel.

These tests verify:
    - Initialization builds one DenseLayer per adjacent pair
    - Weight snapshots have the right shapes and are decoupled copies
    - Activation snapshots (empty before training, cached after)
    - train_step metrics, step counter and not-ready handling
    - reset() and dispose() lifecycle
    - XOR is learned by the default 2-4-1 network
"""

import numpy as np
import pytest

from config import Config
from nnplayground.ai import ConfigError, DisposedError, LayerConfig, NetworkModel, TrainingMetrics
from nnplayground.ai.architecture import parse_architecture
from nnplayground.data import TrainingData, make_xor


@pytest.fixture
def config():
    """Create test configuration."""
    return Config()


@pytest.fixture
def model(config):
    """Initialized default network."""
    net = NetworkModel(config, seed=0)
    net.initialize()
    return net


class TestInitialization:
    """Building the layer stack."""

    def test_layers_created(self, model):
        assert len(model.layers) == 2
        assert model.is_initialized
        assert model.steps == 0

    def test_default_dataset_loaded(self, model):
        assert model.dataset is not None
        assert model.dataset.name == 'xor'

    def test_weight_shapes(self):
        net = NetworkModel(seed=1)
        net.initialize(parse_architecture("2,5:tanh,3:relu,1"))
        shapes = [(w['weights'].shape, w['biases'].shape) for w in net.get_weights()]
        assert shapes == [((2, 5), (5,)), ((5, 3), (3,)), ((3, 1), (1,))]

    def test_invalid_architecture(self, config):
        net = NetworkModel(config)
        with pytest.raises(ConfigError):
            net.initialize([LayerConfig(2, 'linear', 'input')])
        assert not net.is_initialized

    def test_same_seed_same_weights(self, config):
        a = NetworkModel(config, seed=5)
        b = NetworkModel(config, seed=5)
        a.initialize()
        b.initialize()
        for wa, wb in zip(a.get_weights(), b.get_weights()):
            assert np.array_equal(wa['weights'], wb['weights'])

    def test_count_parameters(self, model):
        assert model.count_parameters() == (2 * 4 + 4) + (4 * 1 + 1)

    def test_layer_info(self, model):
        info = model.get_layer_info()
        assert [i['name'] for i in info] == ['Input', 'Hidden 1', 'Output']
        assert [i['activation'] for i in info] == ['linear', 'relu', 'sigmoid']

    def test_repr(self, model):
        assert repr(model) == "NetworkModel(2:linear,4:relu,1:sigmoid, steps=0)"


class TestSnapshots:
    """get_weights() / get_activations()."""

    def test_weights_are_copies(self, model):
        snapshot = model.get_weights()
        snapshot[0]['weights'][:] = 123.0
        assert not np.any(model.get_weights()[0]['weights'] == 123.0)

    def test_snapshot_not_changed_by_training(self, model):
        before = model.get_weights()
        frozen = before[0]['weights'].copy()
        model.train_step()
        assert np.array_equal(before[0]['weights'], frozen)
        assert not np.array_equal(model.get_weights()[0]['weights'], frozen)

    def test_empty_activations_before_training(self, model):
        assert model.get_activations() == [[0.0, 0.0], [0.0] * 4, [0.0]]
        assert model.get_empty_activations() == [[0.0, 0.0], [0.0] * 4, [0.0]]

    def test_activations_after_step(self, model):
        model.train_step()
        acts = model.get_activations()
        assert [len(a) for a in acts] == [2, 4, 1]
        # First sample of xor is (0, 0)
        assert acts[0] == [0.0, 0.0]
        assert all(v >= 0 for v in acts[1])
        assert 0.0 < acts[2][0] < 1.0

    def test_activations_match_predict(self, model):
        model.train_step()
        prediction = model.predict(model.dataset.inputs[0])
        assert model.get_activations()[-1][0] == pytest.approx(float(prediction[0]), abs=1e-6)


class TestTraining:
    """train_step()."""

    def test_returns_metrics(self, model):
        metrics = model.train_step()
        assert isinstance(metrics, TrainingMetrics)
        assert metrics.loss > 0
        assert 0.0 <= metrics.accuracy <= 1.0

    def test_step_counter(self, model):
        for _ in range(7):
            model.train_step()
        assert model.steps == 7

    def test_weights_change(self, model):
        before = model.get_weights()
        model.train_step()
        after = model.get_weights()
        assert not np.array_equal(before[-1]['weights'], after[-1]['weights'])

    def test_uninitialized_returns_zero(self, config):
        net = NetworkModel(config)
        assert net.train_step() == TrainingMetrics.zero()

    def test_width_mismatch_returns_zero(self, model):
        model.load_dataset(TrainingData('wide', [[0, 0, 0]], [[1]]))
        assert model.train_step() == TrainingMetrics(0.0, 0.0)
        assert model.steps == 0

    def test_load_dataset_keeps_weights(self, model):
        before = model.get_weights()
        model.load_dataset('circle')
        assert model.dataset.name == 'circle'
        assert np.array_equal(before[0]['weights'], model.get_weights()[0]['weights'])

    def test_loss_decreases(self, model):
        first = model.train_step().loss
        for _ in range(200):
            last = model.train_step().loss
        assert last < first

    def test_regression_dataset(self, config):
        net = NetworkModel(config, seed=0)
        net.initialize()
        net.load_dataset('sine')
        metrics = net.train_step()
        assert net.dataset.task == 'regression'
        assert metrics.loss > 0

    def test_predict_batch(self, model):
        out = model.predict(make_xor().inputs)
        assert out.shape == (4, 1)
        assert np.all((out > 0) & (out < 1))

    def test_predict_uninitialized(self, config):
        with pytest.raises(RuntimeError):
            NetworkModel(config).predict([[0, 0]])


class TestResetAndDispose:
    """Lifecycle."""

    def test_reset(self, model):
        initial = model.get_weights()
        for _ in range(10):
            model.train_step()
        model.reset()
        assert model.steps == 0
        assert model.get_activations() == model.get_empty_activations()
        assert not np.array_equal(initial[0]['weights'], model.get_weights()[0]['weights'])
        for layer in model.layers:
            assert float(layer.m_weights.abs().sum()) == 0.0
        assert model.dataset.name == 'xor'

    def test_reset_matches_fresh_model(self, config):
        """After reset a trained model looks like a newly built one."""
        configs = parse_architecture("2,4:relu,3:tanh,1:sigmoid")
        reset_losses, fresh_losses = [], []
        for seed in range(8):
            trained = NetworkModel(config, seed=seed)
            trained.initialize(configs)
            for _ in range(200):
                trained.train_step()
            trained.reset()

            fresh = NetworkModel(config, seed=seed + 100)
            fresh.initialize(configs)

            assert trained.get_activations() == fresh.get_empty_activations()
            assert all(v == 0.0 for layer in trained.get_activations() for v in layer)
            assert [(w['weights'].shape, w['biases'].shape) for w in trained.get_weights()] == \
                [(w['weights'].shape, w['biases'].shape) for w in fresh.get_weights()]

            reset_losses.append(trained.train_step().loss)
            fresh_losses.append(fresh.train_step().loss)
            assert trained.steps == fresh.steps == 1

        # First-step losses come from the same initial distribution
        assert all(0.0 < loss < 0.5 for loss in reset_losses + fresh_losses)
        assert np.mean(reset_losses) == pytest.approx(np.mean(fresh_losses), abs=0.08)

    def test_reset_uninitialized_is_noop(self, config):
        NetworkModel(config).reset()

    def test_dispose(self, model):
        model.dispose()
        assert model.is_disposed
        assert repr(model) == "NetworkModel(disposed)"
        with pytest.raises(DisposedError):
            model.get_weights()
        with pytest.raises(DisposedError):
            model.initialize()
        with pytest.raises(DisposedError, match="predict"):
            model.predict([[0, 0]])

    def test_dispose_is_idempotent(self, model):
        model.dispose()
        model.dispose()

    def test_train_step_after_dispose(self, model):
        model.dispose()
        assert model.train_step() == TrainingMetrics.zero()


@pytest.mark.slow
class TestXorConvergence:
    """The default network separates XOR."""

    def test_most_seeds_converge(self, config):
        """Four ReLU units sometimes die early, so not every seed converges."""
        converged = 0
        for seed in range(5):
            net = NetworkModel(config, seed=seed)
            net.initialize()
            for _ in range(1000):
                metrics = net.train_step()
            if metrics.loss < 0.05 and metrics.accuracy == 1.0:
                converged += 1
        assert converged >= 3
