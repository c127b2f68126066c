"""Thread-safe counters for security observations.

The registry is created by the caller and handed to the security monitor,
so each monitor (and each test) owns its own counters.
"""

import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple


LabelKey = Tuple[Tuple[str, str], ...]


@dataclass
class MetricValue:
    """Container for metric values with labels."""

    value: float
    labels: Dict[str, str] = field(default_factory=dict)


class Counter:
    """
    Counter metric that can only increase.

    Useful for counting validations, rejections, anomalies.
    """

    def __init__(self, name: str, description: str, label_names: List[str] = None):
        self.name = name
        self.description = description
        self.label_names = label_names or []
        self._values: Dict[LabelKey, float] = {}
        self._lock = threading.Lock()

    def _make_key(self, labels: Optional[Dict[str, str]]) -> LabelKey:
        """Create key from labels."""
        labels = labels or {}
        unknown = set(labels) - set(self.label_names)
        if unknown:
            raise ValueError(f"Unknown labels for {self.name}: {sorted(unknown)}")
        return tuple(sorted((k, str(v)) for k, v in labels.items()))

    def inc(self, value: float = 1, labels: Optional[Dict[str, str]] = None):
        """Increment the counter."""
        if value < 0:
            raise ValueError("Counters can only increase")
        key = self._make_key(labels)

        with self._lock:
            self._values[key] = self._values.get(key, 0) + value

    def get(self, labels: Optional[Dict[str, str]] = None) -> float:
        """Get current counter value."""
        key = self._make_key(labels)
        with self._lock:
            return self._values.get(key, 0)

    def total(self) -> float:
        """Sum over every label combination."""
        with self._lock:
            return sum(self._values.values())

    def collect(self) -> List[MetricValue]:
        """Collect all metric values."""
        with self._lock:
            return [MetricValue(value=v, labels=dict(k)) for k, v in self._values.items()]


class MetricsRegistry:
    """
    Registry for security counters.

    Provides centralized management and export.
    """

    def __init__(self):
        self._metrics: Dict[str, Counter] = {}
        self._lock = threading.Lock()

    def counter(
        self,
        name: str,
        description: str,
        label_names: List[str] = None
    ) -> Counter:
        """Create or get a counter metric."""
        with self._lock:
            if name not in self._metrics:
                self._metrics[name] = Counter(name, description, label_names)
            return self._metrics[name]

    def collect_all(self) -> Dict[str, Dict]:
        """Collect all metrics."""
        with self._lock:
            metrics = list(self._metrics.items())

        return {
            name: {"type": "counter", "values": metric.collect()}
            for name, metric in metrics
        }

    def export_prometheus(self) -> str:
        """Export metrics in Prometheus format."""
        lines = []

        with self._lock:
            metrics = list(self._metrics.items())

        for name, metric in metrics:
            lines.append(f"# HELP {name} {metric.description}")
            lines.append(f"# TYPE {name} counter")
            for mv in metric.collect():
                labels = ",".join(f'{k}="{v}"' for k, v in mv.labels.items())
                label_str = "{" + labels + "}" if labels else ""
                lines.append(f"{name}{label_str} {mv.value}")

        return "\n".join(lines)
