"""
Training Controller
===================

Drives NetworkModel.train_step() on a schedule:

    step mode        exactly one step per explicit step() request
    continuous mode  start() ... tick() / run() ... stop()
                     at most one step per STEP_INTERVAL seconds

Everything runs on the caller's thread. A step is an atomic unit of work:
it is never interrupted, and a step requested while another one is still
running (e.g. from an on_step callback) is refused.

Cancellation: stop() cancels the current CancellationToken. A step that is
already running completes; no new tick starts after that.

Reconfiguring or resetting always stops training first and then rebuilds
the model synchronously, so no step can run against a half-built model.
"""

import time
from typing import Callable, List, Optional, Sequence

from config import Config
from .architecture import LayerConfig, default_architecture, format_architecture, validate_architecture
from .metrics import MetricsHistory, TrainingMetrics
from .network import NetworkModel
from ..utils.logger import get_logger, log_training_metrics

logger = get_logger(__name__)

CONTINUOUS = 'continuous'
STEP = 'step'
MODES = (CONTINUOUS, STEP)


class CancellationToken:
    """One-shot flag shared between the controller and its run loop."""

    def __init__(self):
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class IntervalTicker:
    """
    Rate limiter for continuous training.

    ready(now) is True when at least `interval` seconds have passed since the
    last mark(). The very first tick is always ready.
    """

    # Elapsed times this close to the interval count as reached
    TOLERANCE = 1e-9

    def __init__(self, interval: float = 0.1, clock: Callable[[], float] = time.monotonic):
        self.interval = interval
        self.clock = clock
        self._last: Optional[float] = None

    def ready(self, now: Optional[float] = None) -> bool:
        if self._last is None:
            return True
        now = self.clock() if now is None else now
        return now - self._last + self.TOLERANCE >= self.interval

    def mark(self, now: Optional[float] = None) -> None:
        self._last = self.clock() if now is None else now

    def time_until_ready(self, now: Optional[float] = None) -> float:
        now = self.clock() if now is None else now
        if self.ready(now):
            return 0.0
        assert self._last is not None
        return self.interval - (now - self._last)

    def reset(self) -> None:
        self._last = None


class TrainingController:
    """
    Owns a NetworkModel and schedules its training steps.

    Example:
        >>> controller = TrainingController(seed=0)
        >>> controller.step()                      # step mode
        >>> controller.start(); controller.run(max_steps=100)
        >>> graph = controller.graph(800, 500)
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        configs: Optional[Sequence[LayerConfig]] = None,
        dataset: Optional[str] = None,
        seed: Optional[int] = None,
        mode: str = CONTINUOUS,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Build and initialize the first model.

        Args:
            config: Configuration object
            configs: Initial architecture (default from config)
            dataset: Initial dataset name (default from config)
            seed: Seed for weights and generated datasets
            mode: 'continuous' or 'step'
            clock: Time source used by the rate limiter
        """
        self.config = config or Config()
        self.seed = seed if seed is not None else self.config.SEED
        self.dataset_name = dataset or self.config.DEFAULT_DATASET
        self.history = MetricsHistory(self.config.METRICS_HISTORY_LENGTH)
        self.ticker = IntervalTicker(self.config.STEP_INTERVAL, clock)
        self.clock = clock

        self._token: Optional[CancellationToken] = None
        self._in_step = False
        self._callbacks: List[Callable[[TrainingMetrics], None]] = []

        self._mode = STEP
        self.mode = mode

        self.model: Optional[NetworkModel] = None
        self.configure(configs if configs is not None else default_architecture(self.config))

    # =========================================================================
    # STATE
    # =========================================================================

    @property
    def mode(self) -> str:
        return self._mode

    @mode.setter
    def mode(self, value: str) -> None:
        if value not in MODES:
            raise ValueError(f"Unknown training mode '{value}'. Expected one of {MODES}")
        if value == STEP and self.is_training:
            self.stop()
        self._mode = value

    @property
    def is_training(self) -> bool:
        """True while continuous training is running."""
        return self._token is not None and not self._token.cancelled

    @property
    def layer_configs(self) -> List[LayerConfig]:
        return self.model.layer_configs if self.model else []

    def on_step(self, callback: Callable[[TrainingMetrics], None]) -> None:
        """Register a callback invoked with the metrics of every completed step."""
        self._callbacks.append(callback)

    # =========================================================================
    # CONTROL SIGNALS
    # =========================================================================

    def start(self) -> CancellationToken:
        """
        Start continuous training.

        Returns:
            The token that stop() will cancel
        """
        if self.is_training:
            assert self._token is not None
            return self._token
        if self._mode != CONTINUOUS:
            self._mode = CONTINUOUS
        self._token = CancellationToken()
        self.ticker.reset()
        logger.info("Continuous training started")
        return self._token

    def stop(self) -> None:
        """Stop continuous training before the next tick."""
        if self._token is not None and not self._token.cancelled:
            self._token.cancel()
            logger.info(f"Training stopped after {self.history.total_steps} steps")
        self._token = None

    def toggle(self) -> bool:
        """Start or stop continuous training. Returns the new is_training."""
        if self.is_training:
            self.stop()
        else:
            self.start()
        return self.is_training

    def tick(self, now: Optional[float] = None) -> Optional[TrainingMetrics]:
        """
        Called by the host loop once per frame.

        Runs one step when continuous training is on and the rate limit
        allows it.

        Returns:
            The step's metrics, or None if no step ran
        """
        if self._mode != CONTINUOUS or not self.is_training:
            return None
        now = self.clock() if now is None else now
        if not self.ticker.ready(now):
            return None
        self.ticker.mark(now)
        return self._run_step()

    def step(self) -> Optional[TrainingMetrics]:
        """
        Exactly one training step on explicit request (no timer involved).

        Returns:
            The step's metrics, or None if no step ran (one is already in
            flight, or the model cannot train on the current dataset)
        """
        return self._run_step()

    def run(
        self,
        max_steps: Optional[int] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> List[TrainingMetrics]:
        """
        Blocking continuous loop for hosts without a frame loop.

        Starts training if needed and returns when stop() is called (for
        example from an on_step callback) or after max_steps steps.

        Returns:
            Metrics of the steps run by this call
        """
        token = self.start()
        results: List[TrainingMetrics] = []
        while not token.cancelled:
            if max_steps is not None and len(results) >= max_steps:
                break
            wait = self.ticker.time_until_ready()
            if wait > 0:
                sleep(wait)
                if token.cancelled:
                    break
            metrics = self.tick(self.clock())
            if metrics is not None:
                results.append(metrics)
        if token is self._token:
            self.stop()
        return results

    def configure(self, configs: Sequence[LayerConfig]) -> None:
        """
        Replace the network with a new architecture.

        Stops training, validates the architecture, disposes the old model,
        then builds and initializes the new one, clears the history and
        reloads the selected dataset.

        Raises:
            ConfigError: If the architecture is invalid (the old model is kept)
        """
        self.stop()
        configs = validate_architecture(configs)

        if self.model is not None:
            self.model.dispose()
            self.model = None

        model = NetworkModel(self.config, seed=self.seed)
        model.initialize(configs)
        model.load_dataset(self.dataset_name)
        self.model = model
        assert model.dataset is not None
        self.dataset_name = model.dataset.name
        self.history.clear()
        logger.info(f"Network configured: {format_architecture(model.layer_configs)}")

    def reset(self) -> None:
        """Stop training, re-randomize the weights and clear the history."""
        self.stop()
        if self.model is not None:
            self.model.reset()
        self.history.clear()

    def select_dataset(self, name: str) -> None:
        """Swap the training data without touching the weights."""
        if self.model is None:
            self.dataset_name = name
            return
        self.model.load_dataset(name)
        assert self.model.dataset is not None
        self.dataset_name = self.model.dataset.name

    # =========================================================================
    # OUTPUTS
    # =========================================================================

    def graph(self, width: float = 800.0, height: float = 500.0):
        """VisualizationGraph of the current model (zero activations before training)."""
        from ..visualizer.graph import build_visualization_graph

        if self.model is None:
            return build_visualization_graph([], width=width, height=height)
        return build_visualization_graph(
            self.model.layer_configs,
            self.model.get_weights(),
            self.model.get_activations(),
            width=width,
            height=height,
        )

    def shutdown(self) -> None:
        """Stop training and release the model."""
        self.stop()
        if self.model is not None:
            self.model.dispose()
            self.model = None

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _run_step(self) -> Optional[TrainingMetrics]:
        if self._in_step:
            logger.warning("Training step requested while another step is running, ignored")
            return None
        if self.model is None:
            return None

        # The step stays in flight until every callback has observed it
        self._in_step = True
        try:
            steps_before = self.model.steps
            metrics = self.model.train_step()
            if self.model.steps == steps_before:
                # No dataset or mismatched widths: nothing was trained
                logger.warning(
                    f"Model {format_architecture(self.model.layer_configs)} cannot train on "
                    f"'{self.dataset_name}', step skipped"
                )
                self.stop()
                return None
            self.history.add(metrics)
            if self.config.LOG_EVERY and self.history.total_steps % self.config.LOG_EVERY == 0:
                log_training_metrics(
                    self.history.total_steps, metrics.loss, metrics.accuracy,
                    dataset=self.dataset_name,
                )
            for callback in list(self._callbacks):
                callback(metrics)
        finally:
            self._in_step = False
        return metrics
