"""
Linear Regression

Ordinary least squares over (x, y) pairs, used to overlay trendlines on
efficiency scatter data.
"""

from typing import Iterable, List, NamedTuple, Optional, Tuple


class RegressionLine(NamedTuple):
    slope: float
    intercept: float

    def predict(self, x: float) -> float:
        return self.slope * x + self.intercept


def calculate_linear_regression(points: Iterable[Tuple[float, float]]) -> Optional[RegressionLine]:
    """
    Fit y = m*x + b by ordinary least squares.

    Args:
        points: (x, y) pairs

    Returns:
        RegressionLine, or None with fewer than 2 points or when every x is equal

    Examples:
        >>> calculate_linear_regression([(1, 2), (2, 4), (3, 6)])
        RegressionLine(slope=2.0, intercept=0.0)
        >>> calculate_linear_regression([(1, 2)]) is None
        True
    """
    points = list(points)
    n = len(points)
    if n < 2:
        return None

    sum_x = 0.0
    sum_y = 0.0
    sum_xy = 0.0
    sum_xx = 0.0
    for x, y in points:
        sum_x += x
        sum_y += y
        sum_xy += x * y
        sum_xx += x * x

    denominator = n * sum_xx - sum_x * sum_x
    if denominator == 0:
        return None

    slope = (n * sum_xy - sum_x * sum_y) / denominator
    intercept = (sum_y - slope * sum_x) / n
    return RegressionLine(slope, intercept)


def generate_trendline(points: Iterable[Tuple[float, float]]) -> List[Tuple[float, float]]:
    """
    Evaluate the fitted line at every observed x value.

    Returns:
        List of (x, fitted_y) in input order; empty when no line can be fitted
    """
    points = list(points)
    line = calculate_linear_regression(points)
    if line is None:
        return []
    return [(x, line.predict(x)) for x, _ in points]
