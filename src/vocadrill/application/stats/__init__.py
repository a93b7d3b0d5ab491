# Application Stats Package
from .statistics_calculator import StatisticsCalculator, calculate_statistics

__all__ = ["StatisticsCalculator", "calculate_statistics"]
