from .analytics import AnalyticsRecord
from .client import SplunkClient
from .config import DeliveryPolicy, SplunkPumpConfig
from .fields import EventField, ProjectionConfig, build_event
from .pump import DeliveryReport, DeliveryResult, SplunkPump

__all__ = [
    "AnalyticsRecord",
    "SplunkClient",
    "DeliveryPolicy",
    "SplunkPumpConfig",
    "EventField",
    "ProjectionConfig",
    "build_event",
    "DeliveryReport",
    "DeliveryResult",
    "SplunkPump",
]
