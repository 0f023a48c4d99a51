"""
Performance tracking package.

Times the upload, synthesis and persistence stages of each run.
"""
from utils.performance.tracker import PerformanceTracker, get_tracker
from utils.performance.decorators import time_operation, time_operation_context

__all__ = [
    "PerformanceTracker",
    "get_tracker",
    "time_operation",
    "time_operation_context",
]
