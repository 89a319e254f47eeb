"""
Tests for the TrainingController scheduling.

These tests verify:
    - Step mode runs exactly one step per request
    - Continuous mode is rate limited by STEP_INTERVAL
    - Cancellation stops before the next tick
    - A step requested while another is in flight is refused
    - configure()/reset() stop training first and rebuild synchronously
    - Metrics history bookkeeping
"""

import pytest

from config import Config
from nnplayground.ai import ConfigError, LayerConfig, TrainingController, TrainingMetrics
from nnplayground.ai.architecture import parse_architecture
from nnplayground.ai.trainer import CancellationToken, IntervalTicker
from nnplayground.visualizer.graph import VisualizationGraph


@pytest.fixture
def config():
    return Config(STEP_INTERVAL=0.1, LOG_EVERY=0)


@pytest.fixture
def controller(config, fake_clock):
    ctrl = TrainingController(config, seed=0, clock=fake_clock)
    yield ctrl
    ctrl.shutdown()


class TestIntervalTicker:
    """Rate limiter."""

    def test_first_tick_ready(self):
        ticker = IntervalTicker(0.1, clock=lambda: 5.0)
        assert ticker.ready()
        assert ticker.time_until_ready() == 0.0

    def test_interval(self):
        ticker = IntervalTicker(0.1)
        ticker.mark(1.0)
        assert not ticker.ready(1.05)
        assert ticker.time_until_ready(1.05) == pytest.approx(0.05)
        assert ticker.ready(1.1)
        assert ticker.ready(2.0)

    def test_reset(self):
        ticker = IntervalTicker(0.1)
        ticker.mark(1.0)
        ticker.reset()
        assert ticker.ready(1.0)


class TestCancellationToken:
    """One-shot flag."""

    def test_cancel(self):
        token = CancellationToken()
        assert not token.cancelled
        token.cancel()
        assert token.cancelled


class TestStepMode:
    """Explicit single steps."""

    def test_one_step_per_request(self, config, fake_clock):
        ctrl = TrainingController(config, seed=0, mode='step', clock=fake_clock)
        metrics = ctrl.step()
        assert isinstance(metrics, TrainingMetrics)
        assert ctrl.history.total_steps == 1
        assert ctrl.model.steps == 1

    def test_tick_does_nothing_in_step_mode(self, config, fake_clock):
        ctrl = TrainingController(config, seed=0, mode='step', clock=fake_clock)
        fake_clock.advance(10)
        assert ctrl.tick() is None
        assert ctrl.history.total_steps == 0

    def test_n_steps_grow_history_by_n(self, controller):
        for _ in range(12):
            controller.step()
        assert controller.history.total_steps == 12
        assert len(controller.history) == 12
        assert controller.model.steps == 12

    def test_switching_to_step_stops_training(self, controller):
        controller.start()
        controller.mode = 'step'
        assert not controller.is_training

    def test_unknown_mode(self, controller):
        with pytest.raises(ValueError):
            controller.mode = 'turbo'


class TestContinuousMode:
    """Rate-limited ticks."""

    def test_not_running_until_started(self, controller):
        assert controller.tick() is None

    def test_rate_limit(self, controller, fake_clock):
        controller.start()
        assert controller.tick() is not None
        assert controller.tick() is None
        fake_clock.advance(0.05)
        assert controller.tick() is None
        fake_clock.advance(0.06)
        assert controller.tick() is not None
        assert controller.history.total_steps == 2

    def test_at_most_one_step_per_tick(self, controller, fake_clock):
        controller.start()
        controller.tick()
        fake_clock.advance(5.0)
        controller.tick()
        assert controller.history.total_steps == 2

    def test_stop_prevents_next_tick(self, controller, fake_clock):
        token = controller.start()
        controller.tick()
        controller.stop()
        assert token.cancelled
        fake_clock.advance(1.0)
        assert controller.tick() is None
        assert controller.history.total_steps == 1

    def test_toggle(self, controller):
        assert controller.toggle() is True
        assert controller.is_training
        assert controller.toggle() is False

    def test_start_switches_to_continuous(self, config, fake_clock):
        ctrl = TrainingController(config, seed=0, mode='step', clock=fake_clock)
        ctrl.start()
        assert ctrl.mode == 'continuous'
        assert ctrl.is_training

    def test_start_twice_returns_same_token(self, controller):
        assert controller.start() is controller.start()


class TestRun:
    """Blocking loop with an injected sleep."""

    def test_max_steps(self, controller, fake_clock):
        sleeps = []

        def sleep(seconds):
            sleeps.append(seconds)
            fake_clock.advance(seconds)

        results = controller.run(max_steps=5, sleep=sleep)
        assert len(results) == 5
        assert controller.history.total_steps == 5
        assert not controller.is_training
        # Never faster than the interval
        assert fake_clock() >= 0.4 - 1e-9

    def test_stop_from_callback(self, controller, fake_clock):
        controller.on_step(lambda m: controller.stop() if controller.history.total_steps >= 3 else None)
        results = controller.run(sleep=fake_clock.advance)
        assert len(results) == 3
        assert not controller.is_training


class TestInFlightGuard:
    """Steps never overlap."""

    def test_step_from_callback_is_refused(self, controller):
        nested = []
        controller.on_step(lambda m: nested.append(controller.step()))
        controller.step()
        assert nested == [None]
        assert controller.history.total_steps == 1

    def test_callback_receives_metrics(self, controller):
        seen = []
        controller.on_step(seen.append)
        metrics = controller.step()
        assert seen == [metrics]

    def test_guard_released_after_callback_error(self, controller):
        def boom(metrics):
            raise RuntimeError("callback failed")

        controller.on_step(boom)
        with pytest.raises(RuntimeError):
            controller.step()
        controller._callbacks.clear()
        assert controller.step() is not None


class TestUntrainableModel:
    """A network whose widths do not match the dataset never records steps."""

    @pytest.fixture
    def mismatched(self, config, fake_clock):
        ctrl = TrainingController(config, configs=parse_architecture("3,4,1"), seed=0, clock=fake_clock)
        yield ctrl
        ctrl.shutdown()

    def test_steps_are_not_recorded(self, mismatched):
        seen = []
        mismatched.on_step(seen.append)
        for _ in range(3):
            assert mismatched.step() is None
        assert mismatched.model.steps == 0
        assert mismatched.history.total_steps == 0
        assert mismatched.history.get_best_loss() is None
        assert seen == []

    def test_continuous_training_stops(self, mismatched, fake_clock):
        mismatched.start()
        assert mismatched.tick() is None
        assert not mismatched.is_training
        assert mismatched.history.total_steps == 0

    def test_run_returns(self, mismatched, fake_clock):
        sleeps = []
        assert mismatched.run(max_steps=10, sleep=sleeps.append) == []
        assert not mismatched.is_training

    def test_training_resumes_after_fix(self, mismatched):
        mismatched.configure(parse_architecture("2,4,1"))
        assert mismatched.step() is not None
        assert mismatched.history.total_steps == 1


class TestReconfigure:
    """configure(), reset(), select_dataset()."""

    def test_configure_stops_and_rebuilds(self, controller):
        controller.start()
        controller.step()
        old_model = controller.model

        controller.configure(parse_architecture("2,6:tanh,1:sigmoid"))

        assert not controller.is_training
        assert old_model.is_disposed
        assert controller.model is not old_model
        assert [l.neurons for l in controller.layer_configs] == [2, 6, 1]
        assert controller.history.total_steps == 0
        assert controller.model.dataset.name == 'xor'

    def test_configure_keeps_selected_dataset(self, controller):
        controller.select_dataset('circle')
        controller.configure(parse_architecture("2,3,1"))
        assert controller.model.dataset.name == 'circle'

    def test_invalid_configure_keeps_old_model(self, controller):
        old_model = controller.model
        with pytest.raises(ConfigError):
            controller.configure([LayerConfig(2, 'linear', 'input')])
        assert controller.model is old_model
        assert not old_model.is_disposed

    def test_reset(self, controller):
        controller.start()
        for _ in range(3):
            controller.step()
        controller.reset()
        assert not controller.is_training
        assert controller.history.total_steps == 0
        assert controller.model.steps == 0

    def test_select_dataset_keeps_weights(self, controller):
        before = controller.model.get_weights()[0]['weights'].copy()
        controller.select_dataset('spiral')
        assert controller.dataset_name == 'spiral'
        assert (controller.model.get_weights()[0]['weights'] == before).all()

    def test_unknown_dataset_falls_back(self, controller):
        controller.select_dataset('moons')
        assert controller.dataset_name == 'xor'

    def test_unknown_initial_dataset_falls_back(self, config, fake_clock):
        ctrl = TrainingController(config, dataset='bogus', seed=0, clock=fake_clock)
        assert ctrl.dataset_name == 'xor'
        assert ctrl.model.dataset.name == 'xor'
        ctrl.shutdown()

    def test_failed_dataset_swap_keeps_name(self, controller):
        """An odd count cannot be split into two spiral arms."""
        controller.config.DATASET_POINTS = 7
        controller.select_dataset('circle')
        with pytest.raises(ValueError):
            controller.select_dataset('spiral')
        assert controller.dataset_name == 'circle'
        assert controller.model.dataset.name == 'circle'


class TestOutputs:
    """Graph and history."""

    def test_graph_before_training(self, controller):
        graph = controller.graph(800, 500)
        assert isinstance(graph, VisualizationGraph)
        assert len(graph.neurons) == 7
        assert all(n.activation == 0.0 for n in graph.neurons)

    def test_graph_after_step(self, controller):
        controller.step()
        graph = controller.graph()
        assert any(n.activation != 0.0 for n in graph.layer(2))

    def test_history_bounded(self, fake_clock):
        ctrl = TrainingController(Config(METRICS_HISTORY_LENGTH=5, LOG_EVERY=0), seed=0, clock=fake_clock)
        for _ in range(8):
            ctrl.step()
        assert len(ctrl.history) == 5
        assert ctrl.history.total_steps == 8
        assert ctrl.history.get_best_loss() == min(ctrl.history.losses)

    def test_shutdown(self, controller):
        controller.shutdown()
        assert controller.model is None
        assert controller.step() is None
        assert controller.graph().neurons == []
