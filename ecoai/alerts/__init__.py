from .config import AlertsConfig, InsightPriority, Severity
from .engine import Alert, AlertsEngine
from .insights import DEFAULT_RULES, Insight, InsightRule, MetricsSnapshot

__all__ = [
    "Alert", "AlertsConfig", "AlertsEngine", "DEFAULT_RULES", "Insight",
    "InsightPriority", "InsightRule", "MetricsSnapshot", "Severity",
]
