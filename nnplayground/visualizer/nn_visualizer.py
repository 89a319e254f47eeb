"""
Neural Network Visualizer
=========================

Draws a VisualizationGraph with pygame.

The renderer never talks to the model. It only reads the graph handed to
render(), so anything that can build a VisualizationGraph can be drawn.

Drawing rules:
    - Connections: blue for positive weights, red for negative ones,
      thickness min(|w| * 3, VIS_MAX_WEIGHT_WIDTH), at least 1px
    - Neurons: inactive color blended toward the active color with
      opacity 0.3 + 0.7 * |activation| (activation clipped to 1)
    - Layer labels: "Input", "Hidden (relu)", "Output (sigmoid)"
    - Activation values are eased between frames for smooth transitions
"""

import math
import os
from typing import Dict, List, Optional, Tuple

os.environ.setdefault('PYGAME_HIDE_SUPPORT_PROMPT', '1')

import pygame
import pygame.gfxdraw

from config import Config
from .graph import ConnectionView, NeuronView, VisualizationGraph

Color = Tuple[int, int, int]

WEIGHT_WIDTH_SCALE = 3.0
MIN_OPACITY = 0.3


def interpolate_color(color1: Color, color2: Color, t: float) -> Color:
    """Linear blend of two colors, t clipped to [0, 1]."""
    t = max(0.0, min(1.0, t))
    return (
        int(color1[0] + (color2[0] - color1[0]) * t),
        int(color1[1] + (color2[1] - color1[1]) * t),
        int(color1[2] + (color2[2] - color1[2]) * t),
    )


def neuron_opacity(activation: float) -> float:
    """0.3 for a silent neuron up to 1.0 for |activation| >= 1."""
    return MIN_OPACITY + (1.0 - MIN_OPACITY) * min(abs(activation), 1.0)


def connection_width(weight: float, max_width: int) -> int:
    return max(1, min(int(abs(weight) * WEIGHT_WIDTH_SCALE), max_width))


def layer_label(role: str, activation: str) -> str:
    if role == 'input':
        return "Input"
    title = "Output" if role == 'output' else "Hidden"
    return f"{title} ({activation})"


class NeuralNetVisualizer:
    """
    pygame renderer for a VisualizationGraph.

    Example:
        >>> visualizer = NeuralNetVisualizer(config, x=20, y=20, width=640, height=460)
        >>> visualizer.render(screen, controller.graph(*visualizer.graph_size))
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        x: int = 0,
        y: int = 0,
        width: int = 640,
        height: int = 460
    ):
        """
        Initialize the visualizer.

        Args:
            config: Configuration object
            x: X position of visualization area
            y: Y position of visualization area
            width: Width of visualization area
            height: Height of visualization area
        """
        self.config = config or Config()
        self.x = x
        self.y = y
        self.width = width
        self.height = height

        self.neuron_radius = self.config.VIS_NEURON_RADIUS
        self.max_weight_width = self.config.VIS_MAX_WEIGHT_WIDTH

        self.bg_color = (12, 12, 24)
        self.border_color = (45, 50, 70)
        self.text_color = self.config.COLOR_TEXT
        self.label_color = (150, 150, 175)
        self.inactive_color = self.config.VIS_COLOR_INACTIVE
        self.active_color = self.config.VIS_COLOR_ACTIVE
        self.weight_positive = self.config.VIS_COLOR_WEIGHT_POS
        self.weight_negative = self.config.VIS_COLOR_WEIGHT_NEG

        pygame.font.init()
        self.font_small = pygame.font.Font(None, 18)
        self.font_medium = pygame.font.Font(None, 24)
        self.font_title = pygame.font.Font(None, 32)

        # Space above the graph for the title, below it for the layer labels
        self.header_height = 40
        self.footer_height = 30

        # Eased activation per neuron id
        self.smoothing = 0.3
        self._displayed: Dict[str, float] = {}

    @property
    def graph_size(self) -> Tuple[int, int]:
        """Drawing area to pass to build_visualization_graph()."""
        return (self.width, self.height - self.header_height - self.footer_height)

    def render(
        self,
        screen: pygame.Surface,
        graph: VisualizationGraph,
        title: str = "Neural Network",
        subtitle: Optional[str] = None
    ) -> None:
        """
        Draw one frame of the network.

        Args:
            screen: Pygame surface to draw on
            graph: Graph built for self.graph_size
            title: Panel title
            subtitle: Optional line under the title (e.g. the summary)
        """
        self._draw_background(screen)
        self._draw_title(screen, title, subtitle)

        if not graph.neurons:
            text = self.font_medium.render("No network configured", True, self.label_color)
            screen.blit(text, text.get_rect(center=(self.x + self.width // 2, self.y + self.height // 2)))
            return

        positions = {n.id: self._to_screen(n) for n in graph.neurons}
        activations = self._smooth_activations(graph.neurons)

        self._draw_connections(screen, graph.connections, positions)
        self._draw_neurons(screen, graph.neurons, positions, activations)
        self._draw_layer_labels(screen, graph)

    def weight_color(self, weight: float) -> Color:
        return self.weight_positive if weight >= 0 else self.weight_negative

    def neuron_color(self, activation: float) -> Color:
        return interpolate_color(self.inactive_color, self.active_color, neuron_opacity(activation))

    def _to_screen(self, neuron: NeuronView) -> Tuple[int, int]:
        return (
            int(self.x + neuron.x),
            int(self.y + self.header_height + neuron.y),
        )

    def _smooth_activations(self, neurons: List[NeuronView]) -> Dict[str, float]:
        """Ease displayed activations toward the graph's values."""
        smoothed = {}
        for neuron in neurons:
            prev = self._displayed.get(neuron.id)
            if prev is None:
                value = neuron.activation
            else:
                value = prev + (neuron.activation - prev) * self.smoothing
            smoothed[neuron.id] = value
        # Neurons that disappeared after a reconfiguration are forgotten
        self._displayed = smoothed
        return smoothed

    def _draw_background(self, screen: pygame.Surface) -> None:
        panel_rect = pygame.Rect(self.x, self.y, self.width, self.height)
        pygame.draw.rect(screen, self.bg_color, panel_rect, border_radius=8)
        pygame.draw.rect(screen, self.border_color, panel_rect, 2, border_radius=8)

    def _draw_title(self, screen: pygame.Surface, title: str, subtitle: Optional[str]) -> None:
        text = self.font_title.render(title, True, (100, 180, 255))
        screen.blit(text, (self.x + 12, self.y + 8))
        if subtitle:
            sub = self.font_small.render(subtitle, True, self.label_color)
            screen.blit(sub, sub.get_rect(right=self.x + self.width - 12, top=self.y + 14))

    def _draw_connections(
        self,
        screen: pygame.Surface,
        connections: List[ConnectionView],
        positions: Dict[str, Tuple[int, int]]
    ) -> None:
        for connection in connections:
            start = positions.get(connection.source_id)
            end = positions.get(connection.target_id)
            if start is None or end is None:
                continue
            width = connection_width(connection.weight, self.max_weight_width)
            # Weak weights fade into the background
            strength = min(abs(connection.weight), 1.0)
            color = interpolate_color(self.bg_color, self.weight_color(connection.weight), 0.25 + 0.75 * strength)
            if width <= 1:
                pygame.draw.aaline(screen, color, start, end)
            else:
                pygame.draw.line(screen, color, start, end, width)

    def _draw_neurons(
        self,
        screen: pygame.Surface,
        neurons: List[NeuronView],
        positions: Dict[str, Tuple[int, int]],
        activations: Dict[str, float]
    ) -> None:
        for neuron in neurons:
            x, y = positions[neuron.id]
            activation = activations.get(neuron.id, 0.0)
            color = self.neuron_color(activation)

            pygame.gfxdraw.filled_circle(screen, x, y, self.neuron_radius, color)
            pygame.gfxdraw.aacircle(screen, x, y, self.neuron_radius, color)
            pygame.gfxdraw.aacircle(screen, x, y, self.neuron_radius + 1, self.border_color)

            if math.isfinite(activation):
                value = self.font_small.render(f"{activation:.2f}", True, self.text_color)
                screen.blit(value, value.get_rect(center=(x, y)))

    def _draw_layer_labels(self, screen: pygame.Surface, graph: VisualizationGraph) -> None:
        label_y = self.y + self.height - self.footer_height + 8
        for layer_index in range(graph.num_layers):
            layer = graph.layer(layer_index)
            if not layer:
                continue
            first = layer[0]
            label = layer_label(first.layer_role, first.activation_function)
            text = self.font_small.render(label, True, self.label_color)
            x = self._to_screen(first)[0]
            screen.blit(text, text.get_rect(centerx=x, top=label_y))
