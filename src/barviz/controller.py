import enum
import logging

from barviz.bar_layout import BarLayoutEngine, GeometryConfig
from barviz.constants import (
    BAR_COLOR,
    BAR_CORNER_RADIUS,
    BAR_SPACING,
    BAR_WIDTH,
    CORNER_RADIUS_DIVISOR,
    DECAY_AMOUNT,
    DECAY_SPEED,
    ENERGY_EPSILON,
)
from barviz.decay_history import DecayHistory
from barviz.scheduler import ManualScheduler

logger = logging.getLogger(__name__)


class ControllerState(enum.Enum):
    IDLE = "idle"
    DECAYING = "decaying"


class BarFrame:
    """Everything a host needs to draw the bars for one tick."""

    def __init__(self, rects, corner_radius, color, width, height):
        self.rects = rects
        self.corner_radius = corner_radius
        self.color = color
        self.width = width
        self.height = height

    def __len__(self):
        return len(self.rects)

    def __repr__(self):
        return (
            f"BarFrame({len(self.rects)} bars, corner_radius={self.corner_radius}, "
            f"color={self.color}, size={self.width}x{self.height})"
        )


def decibels_to_amplitude(decibels):
    """Convert a dB reading (0 dB = full scale) to a linear amplitude."""
    return 10 ** (decibels / 20)


def _check_color(color):
    color = tuple(color)
    if len(color) != 3 or not all(isinstance(c, int) and 0 <= c <= 255 for c in color):
        raise ValueError(f"Bar color must be three ints in 0..255, got {color!r}")
    return color


class VisualizerController:
    """
    Drives a row of bars from a stream of decibel readings.

    Each call to `add_value` replaces the pending newest value and makes sure
    the tick timer is running. Every tick commits the newest value to the
    history, rewrites the bar rectangles and decays the newest value. Once
    the history has no energy left the timer is released.

    Setters apply immediately: geometry setters rebuild every bar, the color
    setter only repaints, and timing setters affect the next tick.
    """

    def __init__(
        self,
        width=0.0,
        height=0.0,
        bar_width=BAR_WIDTH,
        bar_spacing=BAR_SPACING,
        bar_corner_radius=BAR_CORNER_RADIUS,
        bar_color=BAR_COLOR,
        decay_speed=DECAY_SPEED,
        decay_amount=DECAY_AMOUNT,
        corner_radius_divisor=CORNER_RADIUS_DIVISOR,
        scheduler=None,
        engine=None,
    ):
        self._engine = engine or BarLayoutEngine()
        self._scheduler = scheduler or ManualScheduler()
        self._config = GeometryConfig(
            bar_width=bar_width,
            bar_spacing=bar_spacing,
            bar_corner_radius=bar_corner_radius,
            container_width=width,
            container_height=height,
            corner_radius_divisor=corner_radius_divisor,
        )
        self._color = _check_color(bar_color)
        self._decay_speed = self._check_decay_speed(decay_speed)
        self._decay_amount = self._check_decay_amount(decay_amount)

        self._history = DecayHistory()
        self._newest_value = 0.0
        self._timer = None
        self._subscribers = []
        self._rects = []

        self._rebuild()

    # --- Read-only state ---

    @property
    def config(self):
        return self._config

    @property
    def scheduler(self):
        return self._scheduler

    @property
    def bar_width(self):
        return self._config.bar_width

    @property
    def bar_spacing(self):
        return self._config.bar_spacing

    @property
    def bar_corner_radius(self):
        return self._config.bar_corner_radius

    @property
    def bar_color(self):
        return self._color

    @property
    def decay_speed(self):
        return self._decay_speed

    @property
    def decay_amount(self):
        return self._decay_amount

    @property
    def newest_value(self):
        return self._newest_value

    @property
    def history(self):
        return self._history

    @property
    def bar_count(self):
        return len(self._rects)

    @property
    def state(self):
        return ControllerState.DECAYING if self._timer is not None else ControllerState.IDLE

    # --- Input ---

    def add_value(self, sample):
        """
        Feed one decibel reading, e.g. an audio meter's average power.

        Readings arriving faster than the tick rate overwrite each other.
        """
        self._newest_value = decibels_to_amplitude(sample)
        self._start_timer()

    # --- Configuration ---

    def set_bar_width(self, bar_width):
        """Change the bar width. Always rebuilds every bar."""
        self._config = self._config.with_changes(bar_width=float(bar_width))
        self._rebuild()

    def set_bar_spacing(self, bar_spacing):
        """Change the gap between bars. Always rebuilds every bar."""
        self._config = self._config.with_changes(bar_spacing=float(bar_spacing))
        self._rebuild()

    def set_bar_corner_radius(self, radius):
        """Change the corner radius; negative derives it from the width. Rebuilds."""
        self._config = self._config.with_changes(bar_corner_radius=float(radius))
        self._rebuild()

    def set_bar_color(self, color):
        """Repaint with a new BGR color. Geometry and history are untouched."""
        self._color = _check_color(color)
        self._publish()

    def set_decay_speed(self, decay_speed):
        """
        Change the tick interval.

        A running timer is cancelled; the next `add_value` arms a new one at
        the new interval.
        """
        self._decay_speed = self._check_decay_speed(decay_speed)
        if self._timer is not None:
            logger.debug("Decay speed changed to %.3fs, restarting ticks", decay_speed)
            self._stop_timer()

    def set_decay_amount(self, decay_amount):
        self._decay_amount = self._check_decay_amount(decay_amount)

    def resize(self, width, height):
        """Host hook for container size changes. Rebuilds every bar."""
        self._config = self._config.with_changes(
            container_width=float(width), container_height=float(height)
        )
        self._rebuild()

    # --- Output ---

    def frame(self):
        return BarFrame(
            rects=list(self._rects),
            corner_radius=self._engine.corner_radius(self._config),
            color=self._color,
            width=self._config.container_width,
            height=self._config.container_height,
        )

    def subscribe(self, callback):
        """
        Call `callback(frame)` after every tick, rebuild and repaint.

        Returns a function that removes the subscription.
        """
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    # --- Lifecycle ---

    def close(self):
        self._stop_timer()
        self._subscribers.clear()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    # --- Internals ---

    def tick(self):
        """One decay step. Normally invoked by the scheduler."""
        self._history.push(self._newest_value)
        self._history.trim(len(self._rects))

        for index, value in enumerate(self._history):
            if index == 0:
                self._rects[0] = self._engine.bar_rect(self._config, 0, value)
            else:
                self._rects[2 * index - 1] = self._engine.bar_rect(self._config, -index, value)
                self._rects[2 * index] = self._engine.bar_rect(self._config, index, value)

        self._newest_value *= self._decay_amount

        if self._history.total_energy() <= ENERGY_EPSILON:
            logger.debug("History energy exhausted, stopping ticks")
            self._stop_timer()

        self._publish()

    def _rebuild(self):
        slots = self._engine.layout(self._config, self._history.value_at)
        self._rects = [slot.rect for slot in slots]
        self._history.trim(len(self._rects))
        logger.debug("Rebuilt %d bars for %s", len(self._rects), self._config)
        self._publish()

    def _publish(self):
        if not self._subscribers:
            return
        frame = self.frame()
        for callback in list(self._subscribers):
            callback(frame)

    def _start_timer(self):
        if self._timer is not None:
            return
        logger.debug("Starting decay ticks every %.3fs", self._decay_speed)
        self._timer = self._scheduler.schedule_repeating(self._decay_speed, self.tick)

    def _stop_timer(self):
        if self._timer is None:
            return
        self._timer.cancel()
        self._timer = None

    @staticmethod
    def _check_decay_speed(decay_speed):
        if decay_speed <= 0:
            raise ValueError(f"Decay speed must be positive, got {decay_speed}")
        return float(decay_speed)

    @staticmethod
    def _check_decay_amount(decay_amount):
        if not 0 <= decay_amount < 1:
            raise ValueError(f"Decay amount must be in [0, 1), got {decay_amount}")
        return float(decay_amount)
