"""Probes, their result sets and the periodic scheduler that drives them."""

from measurement.app_pushability import AppPushability
from measurement.base import Probe
from measurement.http_availability import HTTPAvailability
from measurement.models import ProbeResult, SchedulerState
from measurement.periodic import Periodic
from measurement.recent_logs import RecentLogs
from measurement.result_set import ResultSet
from measurement.retry import RetryCondition, RetryPolicy
from measurement.streaming_logs import StreamingLogs

__all__ = [
    "AppPushability",
    "HTTPAvailability",
    "Periodic",
    "Probe",
    "ProbeResult",
    "RecentLogs",
    "ResultSet",
    "RetryCondition",
    "RetryPolicy",
    "SchedulerState",
    "StreamingLogs",
]
