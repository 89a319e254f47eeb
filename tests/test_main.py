"""
Tests for the command line entry point: headless runs and the visual
mode's key bindings.
"""

import pygame
import pytest

from config import Config
from main import PlaygroundApp, build_config, main, parse_args
from nnplayground.ai import TrainingController
from nnplayground.ai.activations import list_activations
from nnplayground.ai.trainer import STEP
from nnplayground.utils.logger import setup_logging


@pytest.fixture(autouse=True)
def quiet_logging():
    """Drop the console handler main() installs on the captured stdout."""
    yield
    setup_logging(console_output=False, file_output=False, force=True)


class TestParseArgs:
    """Argument parsing."""

    def test_defaults(self):
        args = parse_args([])
        assert not args.headless
        assert args.steps == 1000
        assert args.dataset is None
        assert args.mode is None

    def test_dataset_choices(self):
        with pytest.raises(SystemExit):
            parse_args(['--dataset', 'moons'])

    def test_build_config_overrides(self):
        args = parse_args(['--dataset', 'spiral', '--points', '40', '--seed', '3'])
        cfg = build_config(args)
        assert cfg.DEFAULT_DATASET == 'spiral'
        assert cfg.DATASET_POINTS == 40
        assert cfg.LEARNING_RATE == 0.01
        assert cfg.SEED == 3


class TestHeadlessRun:
    """End-to-end runs without a window."""

    def test_headless_steps(self, capsys):
        code = main(['--headless', '--steps', '25', '--seed', '0', '--no-log-file'])
        out = capsys.readouterr().out
        assert code == 0
        assert "Training Complete!" in out
        assert "Total steps:     25" in out
        assert "Predictions:" in out

    def test_custom_architecture(self, capsys):
        code = main([
            '--headless', '--steps', '5', '--no-log-file',
            '--architecture', '2,3:tanh,3:tanh,1:sigmoid', '--dataset', 'circle',
        ])
        out = capsys.readouterr().out
        assert code == 0
        assert "2:linear,3:tanh,3:tanh,1:sigmoid" in out

    def test_invalid_architecture(self, capsys):
        code = main(['--headless', '--no-log-file', '--architecture', '2,0,1'])
        assert code == 2
        assert "Invalid architecture" in capsys.readouterr().out

    def test_odd_point_count_for_spiral(self, capsys):
        code = main(['--headless', '--no-log-file', '--dataset', 'spiral', '--points', '7'])
        assert code == 2
        assert "Invalid dataset options" in capsys.readouterr().out

    def test_odd_point_count_for_circle(self, capsys):
        code = main(['--headless', '--steps', '3', '--no-log-file', '--dataset', 'circle', '--points', '7'])
        assert code == 0

    def test_learning_rate_is_not_an_option(self, capsys):
        with pytest.raises(SystemExit):
            parse_args(['--lr', '0.05'])

    def test_untrainable_network_reports_no_steps(self, capsys):
        """A 3-input network cannot train on the 2-input xor data."""
        code = main(['--headless', '--steps', '5', '--no-log-file', '--architecture', '3,4,1'])
        out = capsys.readouterr().out
        assert code == 0
        assert "Total steps:     0" in out
        assert "Best loss" not in out
        assert "Predictions:" not in out


class TestPlaygroundKeys:
    """Key bindings of the visual mode (SDL dummy video driver)."""

    @pytest.fixture
    def app(self, fake_clock):
        cfg = Config(LOG_EVERY=0, NEW_LAYER_NEURONS=5, NEW_LAYER_ACTIVATION='tanh')
        controller = TrainingController(cfg, seed=0, mode=STEP, clock=fake_clock)
        app = PlaygroundApp(cfg, controller)
        yield app
        controller.shutdown()

    def sizes(self, app):
        return [(layer.neurons, layer.activation) for layer in app.controller.layer_configs]

    def test_add_hidden_layer_uses_config(self, app):
        app._handle_key(pygame.K_a)
        assert self.sizes(app) == [(2, 'linear'), (4, 'relu'), (5, 'tanh'), (1, 'sigmoid')]
        assert app.selected_layer == 2

    def test_remove_hidden_layer(self, app):
        app._handle_key(pygame.K_a)
        app._handle_key(pygame.K_d)
        assert self.sizes(app) == [(2, 'linear'), (4, 'relu'), (1, 'sigmoid')]
        assert app.selected_layer == 2

    def test_neuron_count(self, app):
        app._handle_key(pygame.K_UP)
        app._handle_key(pygame.K_UP)
        assert app.controller.layer_configs[1].neurons == 6
        for _ in range(10):
            app._handle_key(pygame.K_DOWN)
        assert app.controller.layer_configs[1].neurons == 1

    def test_activation_cycles(self, app):
        names = list_activations()
        app._handle_key(pygame.K_f)
        expected = names[(names.index('relu') + 1) % len(names)]
        assert app.controller.layer_configs[1].activation == expected

    def test_tab_skips_input_layer(self, app):
        app._handle_key(pygame.K_TAB)
        assert app.selected_layer == 2
        app._handle_key(pygame.K_TAB)
        assert app.selected_layer == 1

    def test_removing_output_is_rejected(self, app):
        app._handle_key(pygame.K_TAB)
        model = app.controller.model
        app._handle_key(pygame.K_d)
        assert app.running
        assert app.controller.model is model
        assert self.sizes(app) == [(2, 'linear'), (4, 'relu'), (1, 'sigmoid')]

    def test_edit_rebuilds_and_clears_history(self, app):
        app._handle_key(pygame.K_s)
        assert app.controller.history.total_steps == 1
        app._handle_key(pygame.K_a)
        assert app.controller.history.total_steps == 0
        assert app.controller.model.steps == 0

    def test_render_after_edit(self, app):
        app._handle_key(pygame.K_a)
        app._handle_key(pygame.K_s)
        app._render()
