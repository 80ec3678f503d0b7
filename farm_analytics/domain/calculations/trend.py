"""Linear trend fitting over time-ordered observations."""

from dataclasses import dataclass
from datetime import datetime
from typing import Sequence

import numpy as np
from sklearn.linear_model import LinearRegression
from sklearn.metrics import r2_score


@dataclass(frozen=True)
class LinearFit:
    """Ordinary least-squares fit y = slope * period + intercept."""

    slope: float
    intercept: float
    r_squared: float

    def predict(self, period: float) -> float:
        return self.slope * period + self.intercept


def fit_linear_trend(values: Sequence[float]) -> LinearFit:
    """
    Fit values against their sequential period index (1, 2, ..., n).

    Args:
        values: Observations in time order

    Returns:
        LinearFit with slope, intercept and R²

    Raises:
        ValueError: If fewer than two values are given
    """
    if len(values) < 2:
        raise ValueError("At least two observations are needed to fit a trend")

    X = np.arange(1, len(values) + 1, dtype=float).reshape(-1, 1)
    y = np.asarray(values, dtype=float)

    model = LinearRegression()
    model.fit(X, y)
    predicted = model.predict(X)

    return LinearFit(
        slope=float(model.coef_[0]),
        intercept=float(model.intercept_),
        r_squared=float(r2_score(y, predicted)),
    )


def average_interval_days(dates: Sequence[datetime], default: float = 365.0) -> float:
    """Mean number of days between consecutive dates, `default` with fewer than two dates."""
    if len(dates) < 2:
        return default
    gaps = [(later - earlier).total_seconds() / 86400 for earlier, later in zip(dates, dates[1:])]
    return float(np.mean(gaps))
