#!/usr/bin/env python3
"""
Neural Network Playground - Main Entry Point
============================================

Build a small feed-forward network, train it on a synthetic dataset and
watch the weights and activations change.

Usage:
    # Visual mode (default)
    python main.py

    # Train without visualization
    python main.py --headless --steps 1000

    # Custom architecture and dataset
    python main.py --architecture "2,8:tanh,8:tanh,1:sigmoid" --dataset spiral

    # Step mode: one training step per keypress
    python main.py --mode step

Press:
    - SPACE: Start/stop continuous training
    - S or RIGHT: Single training step
    - R: Reset weights
    - 1-5: Select dataset
    - TAB: Select next layer to edit
    - A: Add hidden layer before the output
    - D or DELETE: Remove selected hidden layer
    - UP/DOWN: One more / one fewer neuron in the selected layer
    - F: Next activation function for the selected layer
    - ESC or Q: Quit
"""

import argparse
import sys
import time
from typing import Callable, List

import numpy as np

from config import Config
from nnplayground.ai import ConfigError, LayerConfig, TrainingController
from nnplayground.ai.activations import list_activations
from nnplayground.ai.architecture import (
    add_hidden_layer,
    format_architecture,
    parse_architecture,
    remove_hidden_layer,
    set_activation,
    set_neurons,
)
from nnplayground.ai.trainer import CONTINUOUS, MODES, STEP
from nnplayground.data import get_dataset_info, list_datasets
from nnplayground.utils.logger import LogLevel, get_log_path, get_logger, setup_logging
from nnplayground.visualizer.graph import format_summary

logger = get_logger('main')


class PlaygroundApp:
    """
    pygame window with the network on the left and the dashboard on the right.

    The frame loop calls controller.tick() every frame; the controller's
    rate limit decides whether a training step actually runs.
    """

    def __init__(self, config: Config, controller: TrainingController):
        import pygame
        from nnplayground.visualizer.dashboard import Dashboard
        from nnplayground.visualizer.nn_visualizer import NeuralNetVisualizer

        self.pygame = pygame
        self.config = config
        self.controller = controller

        pygame.init()
        self.screen = pygame.display.set_mode((config.SCREEN_WIDTH, config.SCREEN_HEIGHT))
        pygame.display.set_caption("Neural Network Playground")
        self.clock = pygame.time.Clock()
        self.font = pygame.font.Font(None, 20)

        margin = 20
        self.visualizer = NeuralNetVisualizer(
            config,
            x=margin,
            y=margin,
            width=config.GRAPH_WIDTH,
            height=config.GRAPH_HEIGHT,
        )
        dash_x = margin * 2 + config.GRAPH_WIDTH
        self.dashboard = Dashboard(
            config,
            x=dash_x,
            y=margin,
            width=config.SCREEN_WIDTH - dash_x - margin,
            height=config.GRAPH_HEIGHT,
        )
        self.datasets = list_datasets()
        self.selected_layer = 1
        self.running = True

    def run(self) -> None:
        """Main loop: events, at most one training tick, draw."""
        pygame = self.pygame
        while self.running:
            self._handle_events()
            self.controller.tick()
            self._render()
            self.clock.tick(self.config.FPS)
        self.controller.shutdown()
        pygame.quit()

    def _handle_events(self) -> None:
        pygame = self.pygame
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == pygame.KEYDOWN:
                self._handle_key(event.key)

    def _handle_key(self, key: int) -> None:
        pygame = self.pygame
        if key in (pygame.K_ESCAPE, pygame.K_q):
            self.running = False
        elif key == pygame.K_SPACE:
            self.controller.toggle()
        elif key in (pygame.K_s, pygame.K_RIGHT):
            self.controller.mode = STEP
            self.controller.step()
        elif key == pygame.K_r:
            self.controller.reset()
        elif pygame.K_1 <= key <= pygame.K_9:
            index = key - pygame.K_1
            if index < len(self.datasets):
                try:
                    self.controller.select_dataset(self.datasets[index])
                except ValueError as e:
                    logger.warning(f"Cannot load dataset '{self.datasets[index]}': {e}")
        elif key == pygame.K_TAB:
            # Cycles over every layer except the input
            count = len(self.controller.layer_configs)
            self.selected_layer = self.selected_layer % (count - 1) + 1
        elif key == pygame.K_a:
            if self._apply_edit(
                add_hidden_layer, self.config.NEW_LAYER_NEURONS, self.config.NEW_LAYER_ACTIVATION
            ):
                self.selected_layer = len(self.controller.layer_configs) - 2
        elif key in (pygame.K_d, pygame.K_DELETE):
            self._apply_edit(remove_hidden_layer, self.selected_layer)
        elif key in (pygame.K_UP, pygame.K_DOWN):
            delta = 1 if key == pygame.K_UP else -1
            neurons = self.controller.layer_configs[self.selected_layer].neurons + delta
            self._apply_edit(set_neurons, self.selected_layer, neurons)
        elif key == pygame.K_f:
            names = list_activations()
            current = self.controller.layer_configs[self.selected_layer].activation
            following = names[(names.index(current) + 1) % len(names)]
            self._apply_edit(set_activation, self.selected_layer, following)

    def _apply_edit(self, edit: Callable[..., List[LayerConfig]], *args) -> bool:
        """
        Run an architecture edit and rebuild the network with the result.

        Rejected edits are logged and leave the current network in place.

        Returns:
            True if the network was rebuilt
        """
        try:
            configs = edit(self.controller.layer_configs, *args)
            self.controller.configure(configs)
        except ConfigError as e:
            logger.warning(f"Architecture edit rejected: {e}")
            return False
        self.selected_layer = min(self.selected_layer, len(configs) - 1)
        return True

    def _render(self) -> None:
        pygame = self.pygame
        self.screen.fill(self.config.COLOR_BACKGROUND)

        graph = self.controller.graph(*self.visualizer.graph_size)
        self.visualizer.render(
            self.screen,
            graph,
            subtitle=format_summary(self.controller.layer_configs),
        )

        self.dashboard.update(self.controller.history)
        self.dashboard.render(
            self.screen,
            training=self.controller.is_training,
            mode=self.controller.mode,
            dataset=self.controller.dataset_name,
        )

        keys = "SPACE start/stop   S step   R reset   " + \
            "   ".join(f"{i + 1} {name}" for i, name in enumerate(self.datasets)) + "   Q quit"
        help_text = self.font.render(keys, True, (120, 120, 140))
        screen_h = self.config.SCREEN_HEIGHT
        self.screen.blit(help_text, (20, screen_h - 30))

        configs = self.controller.layer_configs
        if self.selected_layer < len(configs):
            layer = configs[self.selected_layer]
            edit_keys = (
                f"Editing layer {self.selected_layer} ({layer.role}: {layer.neurons} {layer.activation})"
                "   TAB next   A add   D remove   UP/DOWN neurons   F activation"
            )
            edit_text = self.font.render(edit_keys, True, (150, 150, 175))
            self.screen.blit(edit_text, (20, screen_h - 55))

        pygame.display.flip()


def run_headless(config: Config, controller: TrainingController, steps: int) -> None:
    """Train without a window and report progress through the logger."""
    print("\n" + "=" * 60)
    print("Starting Headless Training")
    print("=" * 60)
    print(f"   Architecture:   {format_architecture(controller.layer_configs)}")
    print(f"   Dataset:        {controller.dataset_name}")
    print(f"   Mode:           {controller.mode}")
    print(f"   Steps:          {steps}")
    print(f"   Learning Rate:  {config.LEARNING_RATE}")
    print(f"   Device:         {config.DEVICE}")
    print("=" * 60 + "\n")

    start_time = time.time()
    try:
        if controller.mode == CONTINUOUS:
            controller.run(max_steps=steps)
        else:
            for _ in range(steps):
                if controller.step() is None:
                    break
    except KeyboardInterrupt:
        controller.stop()
        print("\nInterrupted by user")

    elapsed = time.time() - start_time
    history = controller.history
    latest = history.latest
    best = history.get_best_loss()

    print("\n" + "=" * 60)
    print("Training Complete!")
    print(f"   Total steps:     {history.total_steps:,}")
    print(f"   Total time:      {elapsed:.1f} s")
    if latest is not None:
        print(f"   Final loss:      {latest.loss:.6f}")
        print(f"   Final accuracy:  {latest.accuracy:.1%}")
    if best is not None:
        print(f"   Best loss:       {best:.6f}")
    print("=" * 60)

    model = controller.model
    if model is not None and model.steps > 0 and model.dataset is not None and len(model.dataset) <= 8:
        predictions = model.predict(model.dataset.inputs)
        print("\nPredictions:")
        for x, target, pred in zip(model.dataset.inputs, model.dataset.outputs, predictions):
            print(f"   {np.round(x, 3)} -> {np.round(pred, 3)} (target {np.round(target, 3)})")


def parse_args(argv=None):
    """Parse command line arguments."""
    available = list_datasets()

    parser = argparse.ArgumentParser(
        description="Neural Network Playground - train and watch a small feed-forward network",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
EXAMPLES
========

    python main.py                                  Visual mode, xor, 2-4-1 network
    python main.py --headless --steps 1000          Train without a window
    python main.py --dataset circle --architecture "2,8:relu,1:sigmoid"
    python main.py --mode step                      One step per keypress

ARCHITECTURE FORMAT
===================

    NEURONS[:ACTIVATION],... from input to output, e.g. "2,4:relu,1:sigmoid"
    Activations: linear, sigmoid, relu, tanh

AVAILABLE DATASETS: {', '.join(available)}
        """
    )

    parser.add_argument(
        '--headless', action='store_true',
        help='Train without visualization'
    )
    parser.add_argument(
        '--steps', type=int, default=1000,
        help='Training steps in headless mode (default: 1000)'
    )
    parser.add_argument(
        '--dataset', type=str, default=None, choices=available,
        help='Dataset to train on (default: from config)'
    )
    parser.add_argument(
        '--architecture', type=str, default=None,
        help='Network layout, e.g. "2,4:relu,1:sigmoid"'
    )
    parser.add_argument(
        '--mode', type=str, default=None, choices=MODES,
        help='continuous (rate limited) or step (default: continuous, step when headless)'
    )
    parser.add_argument(
        '--seed', type=int, default=None,
        help='Random seed for weights and datasets'
    )
    parser.add_argument(
        '--points', type=int, default=None,
        help='Number of points for sampled datasets'
    )
    parser.add_argument(
        '--log-level', type=str, default='INFO',
        choices=[level.name for level in LogLevel],
        help='Console log level (default: INFO)'
    )
    parser.add_argument(
        '--no-log-file', action='store_true',
        help='Do not write a session log file'
    )

    return parser.parse_args(argv)


def print_startup_banner() -> None:
    """Print a welcome banner for the application."""
    print()
    print("=" * 60)
    print("       NEURAL NETWORK PLAYGROUND")
    print("=" * 60)
    print("   Train a tiny network and watch it learn.")
    print()
    print("   Quick Start:")
    print("   - python main.py              # Visual mode (default)")
    print("   - python main.py --headless   # Train without a window")
    print("   - python main.py --help       # See all options")
    print("=" * 60)


def build_config(args: argparse.Namespace) -> Config:
    """Config with command line overrides applied."""
    overrides = {}
    if args.dataset:
        overrides['DEFAULT_DATASET'] = args.dataset
    if args.points is not None:
        overrides['DATASET_POINTS'] = args.points
    if args.seed is not None:
        overrides['SEED'] = args.seed
    return Config(**overrides)


def main(argv=None) -> int:
    """Main entry point."""
    if argv is None and '--help' not in sys.argv and '-h' not in sys.argv:
        print_startup_banner()

    args = parse_args(argv)

    try:
        config = build_config(args)
    except AssertionError as e:
        print(f"Invalid option: {e}")
        return 2

    setup_logging(
        log_dir=config.LOG_DIR,
        level=LogLevel[args.log_level],
        file_output=not args.no_log_file,
        force=True,
    )
    log_path = get_log_path()
    if log_path is not None:
        logger.info(f"Logging to {log_path}")

    mode = args.mode or (STEP if args.headless else CONTINUOUS)

    try:
        configs = parse_architecture(args.architecture) if args.architecture else None
        controller = TrainingController(config, configs=configs, seed=config.SEED, mode=mode)
    except ConfigError as e:
        print(f"Invalid architecture: {e}")
        return 2
    except ValueError as e:
        print(f"Invalid dataset options: {e}")
        return 2

    info = get_dataset_info(controller.dataset_name)
    if info:
        logger.info(f"Dataset: {info['name']} - {info['description']}")
    logger.info(f"Network: {format_summary(controller.layer_configs)}")

    if args.headless:
        run_headless(config, controller, args.steps)
        controller.shutdown()
        return 0

    app = PlaygroundApp(config, controller)
    if mode == CONTINUOUS:
        controller.start()
    app.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
