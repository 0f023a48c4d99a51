"""
PerformanceTracker for collecting per-stage timing metrics.
"""
import logging
from typing import Dict, Any, List, Optional


class PerformanceTracker:
    """
    Tracks how long each pipeline stage takes.
    """

    def __init__(self):
        self.metrics: Dict[str, List[Dict[str, Any]]] = {
            "upload": [],
            "text_extraction": [],
            "synthesis": [],
            "persist": [],
            "total_processing": [],
        }
        self.logger = logging.getLogger(__name__)

    def add_metric(self, category: str, duration: float, **context: Any) -> None:
        """
        Add a timing metric.

        Args:
            category: Category of the operation (upload, synthesis, persist, ...)
            duration: Duration in seconds
            **context: Additional context fields stored with the metric
        """
        self.metrics.setdefault(category, []).append({"duration": duration, **context})

    def get_average_duration(self, category: str) -> float:
        metrics = self.metrics.get(category) or []
        if not metrics:
            return 0.0
        return sum(m["duration"] for m in metrics) / len(metrics)

    def report(self) -> Dict[str, Any]:
        """
        Summarise recorded metrics.

        Returns:
            Dictionary keyed by category with average, max and count
        """
        report = {}
        for category, metrics in self.metrics.items():
            if not metrics:
                continue
            report[category] = {
                "overall_average": self.get_average_duration(category),
                "max_duration": max(m["duration"] for m in metrics),
                "total_operations": len(metrics),
            }
        return report

    def log_report(self) -> None:
        report = self.report()
        self.logger.info("=== Performance Report ===")
        for category, data in report.items():
            self.logger.info(
                f"{category}: avg {data['overall_average']:.2f}s, "
                f"max {data['max_duration']:.2f}s over {data['total_operations']} operation(s)"
            )

    def reset(self) -> None:
        for category in self.metrics:
            self.metrics[category] = []


_tracker: Optional[PerformanceTracker] = None


def get_tracker() -> PerformanceTracker:
    """Return the process-wide tracker, creating it on first use."""
    global _tracker
    if _tracker is None:
        _tracker = PerformanceTracker()
    return _tracker
