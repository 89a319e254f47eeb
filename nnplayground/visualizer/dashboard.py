"""
Training Dashboard
==================

Live training metrics next to the network view.

Features:
    - Scrolling loss chart scaled to the visible window
    - Accuracy line on the same chart, scaled to [0, 1]
    - Metric cards: step, loss, accuracy, best loss, with trend arrows
    - Status line: running/paused, mode, dataset and learning progress

Reads a MetricsHistory only; it never touches the model.
"""

import math
import os
from collections import deque
from typing import List, Optional, Sequence, Tuple

os.environ.setdefault('PYGAME_HIDE_SUPPORT_PROMPT', '1')

import numpy as np
import pygame

from config import Config
from ..ai.metrics import MetricsHistory


class MetricCard:
    """A small card displaying a single metric with trend."""

    def __init__(self, label: str, color: Tuple[int, int, int], fmt: str = "{:.4f}"):
        self.label = label
        self.color = color
        self.fmt = fmt
        self.value = 0.0
        self.history: deque = deque(maxlen=20)

    def update(self, value: float) -> None:
        self.value = value
        self.history.append(value)

    def reset(self) -> None:
        self.value = 0.0
        self.history.clear()

    @property
    def trend(self) -> str:
        """'↑', '↓' or '→' comparing the newest five values with the oldest five."""
        if len(self.history) < 2:
            return "→"
        values = list(self.history)
        recent_avg = np.mean(values[-5:])
        older_avg = np.mean(values[:5]) if len(values) >= 5 else recent_avg
        if recent_avg > older_avg * 1.05:
            return "↑"
        elif recent_avg < older_avg * 0.95:
            return "↓"
        return "→"

    @property
    def text(self) -> str:
        return self.fmt.format(self.value)


def chart_points(
    values: Sequence[float],
    rect: pygame.Rect,
    low: float,
    high: float
) -> List[Tuple[int, int]]:
    """Map values onto rect, oldest on the left, `high` at the top."""
    if len(values) < 2:
        return []
    span = high - low if high > low else 1.0
    step = (rect.width - 10) / (len(values) - 1)
    points = []
    for i, value in enumerate(values):
        norm = (value - low) / span if math.isfinite(value) else 0.0
        norm = max(0.0, min(1.0, norm))
        points.append((
            int(rect.left + 5 + i * step),
            int(rect.bottom - 5 - norm * (rect.height - 10)),
        ))
    return points


PROGRESS_BANDS = (
    (10.0, "Just starting"),
    (30.0, "Learning slowly"),
    (60.0, "Making progress"),
    (80.0, "Learning well"),
)


def learning_progress(losses: Sequence[float]) -> str:
    """Label for how far the loss has dropped since the first recorded step."""
    if len(losses) < 2:
        return "Just starting"
    initial, current = losses[0], losses[-1]
    if not (math.isfinite(initial) and math.isfinite(current)):
        return "Just starting"
    if initial <= 0:
        return "Almost converged"
    reduction = (initial - current) / initial * 100
    for limit, label in PROGRESS_BANDS:
        if reduction < limit:
            return label
    return "Almost converged"


class Dashboard:
    """
    Loss/accuracy chart and metric cards.

    Example:
        >>> dashboard = Dashboard(config, x=680, y=20, width=300, height=460)
        >>> dashboard.update(controller.history)
        >>> dashboard.render(screen, training=True, mode='continuous', dataset='xor')
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        x: int = 0,
        y: int = 0,
        width: int = 300,
        height: int = 460
    ):
        self.config = config or Config()
        self.x = x
        self.y = y
        self.width = width
        self.height = height

        self.bg_color = (12, 14, 24)
        self.chart_bg = (8, 10, 18)
        self.grid_color = (35, 40, 55)
        self.border_color = (45, 50, 70)
        self.text_color = (200, 205, 220)
        self.loss_color = (231, 76, 60)
        self.accuracy_color = (46, 204, 113)
        self.best_color = (241, 196, 15)

        pygame.font.init()
        self.font_tiny = pygame.font.Font(None, 16)
        self.font_small = pygame.font.Font(None, 20)
        self.font_medium = pygame.font.Font(None, 26)
        self.font_title = pygame.font.Font(None, 30)

        self.max_history = self.config.PLOT_HISTORY_LENGTH
        self.losses: List[float] = []
        self.accuracies: List[float] = []
        self.progress = learning_progress([])

        self.cards = {
            'step': MetricCard("Step", self.text_color, "{:,.0f}"),
            'loss': MetricCard("Loss", self.loss_color),
            'accuracy': MetricCard("Accuracy", self.accuracy_color, "{:.1%}"),
            'best': MetricCard("Best loss", self.best_color),
        }

        self.pulse_phase = 0.0

    def update(self, history: MetricsHistory) -> None:
        """Pull the visible window and the card values from the history."""
        self.losses = history.losses[-self.max_history:]
        self.accuracies = history.accuracies[-self.max_history:]
        self.progress = learning_progress(history.losses)

        latest = history.latest
        if latest is None:
            for card in self.cards.values():
                card.reset()
            return

        if self.cards['step'].value != history.total_steps:
            self.cards['step'].update(history.total_steps)
            self.cards['loss'].update(latest.loss)
            self.cards['accuracy'].update(latest.accuracy)
            best = history.get_best_loss()
            self.cards['best'].update(best if best is not None else 0.0)

    def render(
        self,
        screen: pygame.Surface,
        training: bool = False,
        mode: str = 'continuous',
        dataset: str = ''
    ) -> None:
        """Render the dashboard."""
        self.pulse_phase = (self.pulse_phase + 0.05) % (2 * math.pi)

        panel = pygame.Rect(self.x, self.y, self.width, self.height)
        pygame.draw.rect(screen, self.bg_color, panel, border_radius=5)
        pygame.draw.rect(screen, self.border_color, panel, 2, border_radius=5)

        self._draw_title_bar(screen, training, mode, dataset)

        chart_height = self.height // 2
        chart_rect = pygame.Rect(self.x + 10, self.y + 60, self.width - 20, chart_height)
        self._draw_chart(screen, chart_rect)
        self._draw_metric_cards(screen, self.x + 10, chart_rect.bottom + 12, self.width - 20)

    def _draw_title_bar(self, screen: pygame.Surface, training: bool, mode: str, dataset: str) -> None:
        title = self.font_title.render("Training", True, (100, 180, 255))
        screen.blit(title, (self.x + 12, self.y + 8))

        if training:
            pulse = 0.6 + 0.4 * math.sin(self.pulse_phase)
            status_color = (int(100 * pulse), int(220 * pulse), int(130 * pulse))
            status = "● TRAINING"
        else:
            status_color = (160, 160, 180)
            status = "❚❚ PAUSED"
        status_text = self.font_small.render(status, True, status_color)
        screen.blit(status_text, status_text.get_rect(right=self.x + self.width - 12, top=self.y + 12))

        info = self.font_tiny.render(
            f"mode: {mode}   dataset: {dataset}   {self.progress}", True, (120, 120, 140)
        )
        screen.blit(info, (self.x + 12, self.y + 38))

    def _draw_chart(self, screen: pygame.Surface, rect: pygame.Rect) -> None:
        pygame.draw.rect(screen, self.chart_bg, rect, border_radius=5)
        pygame.draw.rect(screen, (40, 45, 60), rect, 1, border_radius=5)

        num_h_lines = 4
        for i in range(1, num_h_lines + 1):
            y = rect.top + (i * rect.height // (num_h_lines + 1))
            pygame.draw.line(screen, self.grid_color, (rect.left + 5, y), (rect.right - 5, y), 1)

        if len(self.losses) < 2:
            text = self.font_medium.render("Collecting data...", True, (80, 80, 100))
            screen.blit(text, text.get_rect(center=rect.center))
            return

        finite = [v for v in self.losses if math.isfinite(v)]
        max_loss = max(finite) if finite else 1.0
        loss_points = chart_points(self.losses, rect, 0.0, max_loss if max_loss > 0 else 1.0)
        if len(loss_points) >= 2:
            pygame.draw.lines(screen, self.loss_color, False, loss_points, 2)

        acc_points = chart_points(self.accuracies, rect, 0.0, 1.0)
        if len(acc_points) >= 2:
            pygame.draw.lines(screen, self.accuracy_color, False, acc_points, 1)

        # Axis hints
        top_label = self.font_tiny.render(f"loss {max_loss:.3f}", True, self.loss_color)
        screen.blit(top_label, (rect.left + 6, rect.top + 4))
        acc_label = self.font_tiny.render("acc 1.0", True, self.accuracy_color)
        screen.blit(acc_label, acc_label.get_rect(right=rect.right - 6, top=rect.top + 4))

    def _draw_metric_cards(self, screen: pygame.Surface, x: int, y: int, width: int) -> None:
        card_height = 34
        for i, card in enumerate(self.cards.values()):
            card_rect = pygame.Rect(x, y + i * (card_height + 6), width, card_height)
            pygame.draw.rect(screen, (18, 20, 32), card_rect, border_radius=4)
            pygame.draw.rect(screen, (40, 45, 60), card_rect, 1, border_radius=4)

            label = self.font_small.render(card.label, True, (140, 140, 160))
            screen.blit(label, (card_rect.left + 8, card_rect.top + 10))

            value = self.font_medium.render(f"{card.text} {card.trend}", True, card.color)
            screen.blit(value, value.get_rect(right=card_rect.right - 8, centery=card_rect.centery))
