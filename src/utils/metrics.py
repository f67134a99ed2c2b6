"""
Prometheus Metrics Collector

Lightweight metrics collection for conversation bookkeeping without external dependencies.
Generates Prometheus text exposition format (text/plain; version=0.0.4).
"""
import threading
from typing import Dict, List, Optional
from dataclasses import dataclass, field
from enum import Enum


class MetricType(str, Enum):
    """Prometheus metric types."""
    COUNTER = "counter"
    GAUGE = "gauge"
    HISTOGRAM = "histogram"


@dataclass
class MetricValue:
    """Single sample with its label set."""
    value: float
    labels: Dict[str, str] = field(default_factory=dict)


class _LabeledMetric:
    """Shared storage for metrics keyed by label combination."""

    metric_type: MetricType

    def __init__(self, name: str, description: str, labels: Optional[List[str]] = None):
        self.name = name
        self.description = description
        self.label_names = labels or []
        self._values: Dict[tuple, float] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _label_key(labels: Dict[str, str]) -> tuple:
        return tuple(sorted(labels.items()))

    def collect(self) -> List[MetricValue]:
        with self._lock:
            return [MetricValue(value=v, labels=dict(k)) for k, v in self._values.items()]


class Counter(_LabeledMetric):
    """
    Cumulative count that only goes up.
    Used for: appended messages, shared robot messages, rejected shares, watermark updates.
    """

    metric_type = MetricType.COUNTER

    def inc(self, amount: float = 1.0, **labels: str) -> None:
        key = self._label_key(labels)
        with self._lock:
            self._values[key] = self._values.get(key, 0.0) + amount


class Gauge(_LabeledMetric):
    """
    Point-in-time value.
    Used for: conversations currently held by a registry.
    """

    metric_type = MetricType.GAUGE

    def set(self, value: float, **labels: str) -> None:
        key = self._label_key(labels)
        with self._lock:
            self._values[key] = value


class Histogram(_LabeledMetric):
    """
    Observations counted into cumulative buckets.
    Used for: estimated token counts per appended message.
    """

    metric_type = MetricType.HISTOGRAM
    DEFAULT_BUCKETS = (10, 25, 50, 100, 250, 500, 1000, 2500, 5000)

    def __init__(
        self,
        name: str,
        description: str,
        labels: Optional[List[str]] = None,
        buckets: Optional[tuple] = None
    ):
        super().__init__(name, description, labels)
        self.buckets = tuple(sorted(buckets or self.DEFAULT_BUCKETS))
        self._values: Dict[tuple, Dict] = {}

    def observe(self, value: float, **labels: str) -> None:
        key = self._label_key(labels)
        with self._lock:
            data = self._values.setdefault(
                key, {"buckets": dict.fromkeys(self.buckets, 0), "sum": 0.0, "count": 0}
            )
            data["sum"] += value
            data["count"] += 1
            for bucket in self.buckets:
                if value <= bucket:
                    data["buckets"][bucket] += 1

    def collect(self) -> List[MetricValue]:
        """Bucket samples (`le` label), then +Inf, sum and count."""
        result = []
        with self._lock:
            for key, data in self._values.items():
                base_labels = dict(key)
                for bucket in self.buckets:
                    result.append(MetricValue(data["buckets"][bucket], {**base_labels, "le": str(bucket)}))
                result.append(MetricValue(data["count"], {**base_labels, "le": "+Inf"}))
                result.append(MetricValue(data["sum"], {**base_labels, "_metric": "sum"}))
                result.append(MetricValue(data["count"], {**base_labels, "_metric": "count"}))
        return result


class MetricsRegistry:
    """
    Central registry for all conversation metrics.

    Provides singleton access and Prometheus text format export.
    """

    _instance: Optional["MetricsRegistry"] = None
    _lock = threading.Lock()

    def __new__(cls) -> "MetricsRegistry":
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self._metrics: Dict[str, _LabeledMetric] = {}
        self._initialized = True

        self._setup_metrics()

    def _setup_metrics(self) -> None:
        """Initialize all conversation metrics."""

        # ============================================
        # MESSAGE METRICS
        # ============================================
        self.messages_appended = self.counter(
            "conv_messages_appended_total",
            "Total messages appended to conversations by author role",
            ["role"]
        )

        self.message_tokens = self.histogram(
            "conv_message_estimated_tokens",
            "Estimated token count per appended message",
            ["role"]
        )

        # ============================================
        # SHARING METRICS
        # ============================================
        self.robot_messages_shared = self.counter(
            "conv_robot_messages_shared_total",
            "Robot messages duplicated for customer visibility"
        )

        self.share_rejections = self.counter(
            "conv_share_rejections_total",
            "Share attempts rejected because the source was not robot-authored",
            ["role"]
        )

        # ============================================
        # SUMMARIZATION METRICS
        # ============================================
        self.watermark_updates = self.counter(
            "conv_watermark_updates_total",
            "Summarization watermark updates by outcome",
            ["outcome"]
        )

        # ============================================
        # REGISTRY METRICS
        # ============================================
        self.conversations_created = self.counter(
            "conv_conversations_created_total",
            "Conversations created through get-or-create"
        )

        self.conversations_removed = self.counter(
            "conv_conversations_removed_total",
            "Conversations removed explicitly or by clear"
        )

        self.active_conversations = self.gauge(
            "conv_active_conversations",
            "Conversations currently held in memory"
        )

    def counter(
        self,
        name: str,
        description: str,
        labels: Optional[List[str]] = None
    ) -> Counter:
        """Create and register a counter."""
        metric = Counter(name, description, labels)
        self._metrics[name] = metric
        return metric

    def gauge(
        self,
        name: str,
        description: str,
        labels: Optional[List[str]] = None
    ) -> Gauge:
        """Create and register a gauge."""
        metric = Gauge(name, description, labels)
        self._metrics[name] = metric
        return metric

    def histogram(
        self,
        name: str,
        description: str,
        labels: Optional[List[str]] = None,
        buckets: Optional[tuple] = None
    ) -> Histogram:
        """Create and register a histogram."""
        metric = Histogram(name, description, labels, buckets)
        self._metrics[name] = metric
        return metric

    def track_message_appended(self, role: str, estimated_tokens: int) -> None:
        """
        Convenience method to track an appended message.

        Args:
            role: Author role of the message
            estimated_tokens: Estimated token count stored on the message
        """
        self.messages_appended.inc(role=role)
        self.message_tokens.observe(estimated_tokens, role=role)

    def export(self) -> str:
        """
        Export all metrics in Prometheus text exposition format.

        Format specification:
        https://prometheus.io/docs/instrumenting/exposition_formats/
        """
        lines = []

        for name, metric in self._metrics.items():
            lines.append(f"# HELP {name} {metric.description}")
            lines.append(f"# TYPE {name} {metric.metric_type.value}")

            for mv in metric.collect():
                sample_name = name
                if "_metric" in mv.labels:
                    sample_name = f"{name}_{mv.labels.pop('_metric')}"
                elif isinstance(metric, Histogram):
                    sample_name = f"{name}_bucket"
                lines.append(f"{sample_name}{self._format_labels(mv.labels)} {mv.value}")

            lines.append("")  # Empty line between metrics

        return "\n".join(lines)

    def _format_labels(self, labels: Dict[str, str]) -> str:
        """Format labels as Prometheus label string."""
        if not labels:
            return ""

        parts = [f'{k}="{v}"' for k, v in sorted(labels.items())]
        return "{" + ",".join(parts) + "}"

    def reset(self) -> None:
        """Reset all metrics. Useful for testing."""
        self._metrics.clear()
        self._setup_metrics()


# Global metrics instance
metrics = MetricsRegistry()
