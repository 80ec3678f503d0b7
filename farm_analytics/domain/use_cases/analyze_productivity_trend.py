"""Use case for fitting a productivity trend and forecasting."""

import logging
from datetime import timedelta
from typing import Optional

import numpy as np

from ..calculations.comparison import mean
from ..calculations.trend import average_interval_days, fit_linear_trend
from ..entities.benchmarks import EfficiencyBenchmarks
from ..entities.productivity import Forecast, ParcelProductivity, ProductivityTrend, TrendPoint
from ..exceptions import InsufficientDataError

logger = logging.getLogger(__name__)


class AnalyzeProductivityTrendUseCase:
    """Fit productivity against harvest order and extrapolate forward."""

    def __init__(self, benchmarks: Optional[EfficiencyBenchmarks] = None):
        self.benchmarks = benchmarks or EfficiencyBenchmarks()

    @staticmethod
    def direction(slope: float) -> str:
        if np.isclose(slope, 0.0, atol=1e-9):
            return "stable"
        return "ascending" if slope > 0 else "descending"

    def execute(self, history: ParcelProductivity) -> ProductivityTrend:
        """
        Execute the use case.

        Args:
            history: Parcel productivity with harvests in ascending date order

        Returns:
            ProductivityTrend with fit, direction, strength and forecasts

        Raises:
            InsufficientDataError: With fewer harvests than the configured minimum
        """
        harvests = history.harvests
        if len(harvests) < self.benchmarks.trend_min_points:
            raise InsufficientDataError(
                f"Trend analysis needs {self.benchmarks.trend_min_points} harvests, "
                f"parcel {history.parcel_id} has {len(harvests)}"
            )

        points = [
            TrendPoint(period=index, productivity=h.productivity, date=h.date)
            for index, h in enumerate(harvests, start=1)
        ]
        fit = fit_linear_trend([p.productivity for p in points])

        average = mean([p.productivity for p in points])
        strength = abs(fit.slope) / average if average else 0.0

        interval = average_interval_days(
            [p.date for p in points], self.benchmarks.default_harvest_interval_days
        )
        n = len(points)
        last_date = points[-1].date
        forecasts = [
            Forecast(
                period=n + step,
                productivity=fit.predict(n + step),
                date=last_date + timedelta(days=interval * step),
            )
            for step in range(1, self.benchmarks.forecast_periods + 1)
        ]

        logger.debug(f"Trend for parcel {history.parcel_id}: slope={fit.slope:.3f} r2={fit.r_squared:.3f}")
        return ProductivityTrend(
            parcel_id=history.parcel_id,
            parcel_name=history.parcel_name,
            points=points,
            slope=fit.slope,
            intercept=fit.intercept,
            direction=self.direction(fit.slope),
            strength=strength,
            forecasts=forecasts,
            r_squared=fit.r_squared,
        )
