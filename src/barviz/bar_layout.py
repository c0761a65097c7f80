import math
from collections import namedtuple

from barviz.constants import (
    BAR_CORNER_RADIUS,
    BAR_SPACING,
    BAR_WIDTH,
    CORNER_RADIUS_DIVISOR,
)

BarRect = namedtuple("BarRect", ["x", "y", "width", "height"])
BarSlot = namedtuple("BarSlot", ["position_from_center", "rect"])


class GeometryConfig:
    """
    Bar geometry for a single layout pass.

    Instances are treated as immutable; use `with_changes` to derive a new
    config when the host changes a setting or the container is resized.
    """

    FIELDS = (
        "bar_width",
        "bar_spacing",
        "bar_corner_radius",
        "container_width",
        "container_height",
        "corner_radius_divisor",
    )

    def __init__(
        self,
        bar_width=BAR_WIDTH,
        bar_spacing=BAR_SPACING,
        bar_corner_radius=BAR_CORNER_RADIUS,
        container_width=0.0,
        container_height=0.0,
        corner_radius_divisor=CORNER_RADIUS_DIVISOR,
    ):
        self.bar_width = float(bar_width)
        self.bar_spacing = float(bar_spacing)
        self.bar_corner_radius = float(bar_corner_radius)
        self.container_width = float(container_width)
        self.container_height = float(container_height)
        self.corner_radius_divisor = corner_radius_divisor

    @property
    def pitch(self):
        """Distance between the centers of two neighbouring bars."""
        return self.bar_width + self.bar_spacing

    def is_degenerate(self):
        return (
            round(self.bar_width) <= 0
            or self.bar_spacing < 0
            or self.container_width <= 0
            or self.container_height <= 0
        )

    def with_changes(self, **changes):
        unknown = set(changes) - set(self.FIELDS)
        if unknown:
            raise TypeError(f"Unknown geometry fields: {', '.join(sorted(unknown))}")
        values = {name: getattr(self, name) for name in self.FIELDS}
        values.update(changes)
        return GeometryConfig(**values)

    def _key(self):
        return tuple(getattr(self, name) for name in self.FIELDS)

    def __eq__(self, other):
        if not isinstance(other, GeometryConfig):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self):
        return hash(self._key())

    def __repr__(self):
        fields = ", ".join(f"{name}={getattr(self, name)!r}" for name in self.FIELDS)
        return f"GeometryConfig({fields})"


def slot_index(position_from_center):
    """Index of the bar at `position_from_center` in a layout's slot list."""
    if position_from_center == 0:
        return 0
    if position_from_center < 0:
        return -2 * position_from_center - 1
    return 2 * position_from_center


def bar_positions(config):
    """
    Bar positions in creation order: the center first, then (-k, +k) pairs.

    The budget is floor(width / pitch). Every created bar consumes one unit
    and pairs keep coming while any budget is left, so the final pair may
    overshoot the budget by one bar.
    """
    if config.is_degenerate():
        return []

    remaining = math.floor(config.container_width / config.pitch)

    positions = [0]
    remaining -= 1

    position = 1
    while remaining > 0:
        positions.append(-position)
        positions.append(position)
        remaining -= 2
        position += 1

    return positions


def bar_count(config):
    return len(bar_positions(config))


def max_half_height(config, position_from_center):
    """
    Tallest half-height a bar may reach at this position.

    Bars taper linearly towards the container edge.
    """
    distance = abs(position_from_center) * config.pitch
    return (1 - distance / config.container_width / 2) * config.container_height / 2


def bar_rect(config, position_from_center, value):
    """Rectangle for the bar at `position_from_center` showing `value`."""
    height = value * max_half_height(config, position_from_center)
    x = (
        math.floor(config.container_width / 2)
        + position_from_center * config.pitch
        - config.bar_width / 2
    )
    y = math.floor(config.container_height / 2) - height
    return BarRect(x, y, config.bar_width, height * 2)


def corner_radius(config):
    radius = config.bar_corner_radius
    if 0 <= radius <= config.bar_width / 2:
        return radius
    return math.floor(config.bar_width / config.corner_radius_divisor)


def layout(config, value_at=None):
    """
    Build every bar slot for `config`.

    `value_at` maps a position from center to the value shown there. When
    omitted all bars are laid out flat. A degenerate config yields no bars.
    """
    if value_at is None:
        value_at = _flat

    return [
        BarSlot(position, bar_rect(config, position, value_at(position)))
        for position in bar_positions(config)
    ]


def _flat(position_from_center):
    return 0.0


class BarLayoutEngine:
    """
    Stateless facade over the layout functions.

    Hosts that prefer an object to pass around can hold one of these; every
    method is a pure function of its arguments.
    """

    slot_index = staticmethod(slot_index)
    bar_positions = staticmethod(bar_positions)
    bar_count = staticmethod(bar_count)
    max_half_height = staticmethod(max_half_height)
    bar_rect = staticmethod(bar_rect)
    corner_radius = staticmethod(corner_radius)
    layout = staticmethod(layout)
