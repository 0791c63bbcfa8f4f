"""Business services."""

from sentinel.services.collector import CollectorError, MarketCollector
from sentinel.services.delivery import CommandCallback, DeliveryService
from sentinel.services.report_service import ReportService
from sentinel.services.scheduler import Schedule, Scheduler

__all__ = [
    "CollectorError",
    "MarketCollector",
    "CommandCallback",
    "DeliveryService",
    "ReportService",
    "Schedule",
    "Scheduler",
]
