"""Order-statistic percentiles over numeric samples."""

from __future__ import annotations

from collections.abc import Iterable

import pandas as pd


def percentile(values: Iterable[float], p: float) -> float:
    """Percentile of ``values`` by linear interpolation between order statistics.

    With ``n`` sorted values the real index is ``p * (n - 1)``; the result
    interpolates between the values at its floor and ceiling. A single value
    is returned as-is for any ``p``.

    Parameters
    ----------
    values : iterable of float
        Sample (any order).
    p : float
        Percentile as a fraction in [0, 1] (0.85 for P85).

    Returns
    -------
    float
        The interpolated percentile.

    Raises
    ------
    ValueError
        If the sample is empty or ``p`` is outside [0, 1].
    """
    if p < 0 or p > 1:
        raise ValueError(f"Percentile must be within [0, 1], got {p}")
    sample = pd.Series(list(values), dtype="float64").dropna()
    if sample.empty:
        raise ValueError("Cannot compute a percentile of an empty sample")
    if len(sample) == 1:
        return float(sample.iloc[0])
    return float(sample.quantile(p, interpolation="linear"))


def percentiles(values: Iterable[float], ps: Iterable[float]) -> dict[float, float]:
    """Several percentiles of the same sample, keyed by ``p``."""
    sample = list(values)
    return {p: percentile(sample, p) for p in ps}
