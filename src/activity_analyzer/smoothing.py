def trailing_average(smoothed: list[float], value: float, window: int) -> float:
    """Causal moving average of value with the already-smoothed values before it.

    Averages the current raw value with up to window // 2 of the most recent
    entries of `smoothed` (the outputs for the preceding points). Only past
    values are used, so a point's result never depends on points after it.
    With nothing to look back on, the raw value is returned unchanged.
    """
    half_window = window // 2
    history = smoothed[max(0, len(smoothed) - half_window):] if half_window > 0 else []
    if not history:
        return value
    return (sum(history) + value) / (len(history) + 1)


def smooth_series(values: list[float], window: int) -> list[float]:
    """Apply trailing_average to a whole series, feeding back smoothed values."""
    smoothed: list[float] = []
    for value in values:
        smoothed.append(trailing_average(smoothed, value, window))
    return smoothed
