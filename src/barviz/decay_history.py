class DecayHistory:
    """
    Recent normalized amplitudes, newest first.

    History index `i` feeds the bar pair at distance `i` from the center, so
    a row of `n` bars never needs more than floor((n + 1) / 2) entries.
    """

    def __init__(self, values=None):
        self._values = list(values) if values else []

    def push(self, value):
        """Insert `value` as the newest entry."""
        self._values.insert(0, float(value))

    def trim(self, bar_count):
        """Drop entries that no bar in a row of `bar_count` can show."""
        max_count = max(0, (bar_count + 1) // 2)
        del self._values[max_count:]

    def value_at(self, position_from_center):
        index = abs(position_from_center)
        if index < len(self._values):
            return self._values[index]
        return 0.0

    def total_energy(self):
        return sum(self._values)

    def clear(self):
        self._values.clear()

    @property
    def values(self):
        return list(self._values)

    def __len__(self):
        return len(self._values)

    def __iter__(self):
        return iter(list(self._values))

    def __repr__(self):
        return f"DecayHistory({self._values!r})"
