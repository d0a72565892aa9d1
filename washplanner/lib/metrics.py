"""
Prometheus-compatible metrics for observability.

Tracks key scheduling indicators:
- Appointments produced by the schedulers
- Scheduling runs (by outcome: full, partial, failed)
- Conflicts encountered (by type)
- Reschedule attempts (by outcome)

Usage:
    from washplanner.lib.metrics import get_metrics_collector
    
    metrics = get_metrics_collector()
    metrics.increment_scheduling_runs(outcome="full")
    metrics.increment_appointments_scheduled(amount=10)
    
    # Export for Prometheus
    prometheus_output = metrics.export_prometheus()
"""

from typing import Dict, Optional, Tuple
from threading import Lock


class MetricsCollector:
    """
    Prometheus-style metrics collector for the scheduling engine.
    
    Counters:
    - appointments_scheduled_total: Appointments produced (labels: source)
    - scheduling_runs_total: Single-customer generations (labels: outcome)
    - conflicts_detected_total: Conflicts reported by the detector (labels: type)
    - reschedules_total: Reschedule attempts (labels: outcome, rescheduled_by)
    
    Thread-safe for concurrent increments.
    """
    
    def __init__(self):
        self._lock = Lock()
        
        # Counters: key = (metric_name, labels_tuple), value = count
        self._counters: Dict[Tuple[str, Tuple[Tuple[str, str], ...]], int] = {}
    
    def _get_counter_key(self, metric_name: str, labels: Dict[str, str]) -> Tuple[str, Tuple[Tuple[str, str], ...]]:
        """Generate unique key for counter with sorted labels."""
        sorted_labels = tuple(sorted(labels.items()))
        return (metric_name, sorted_labels)
    
    def _increment(self, metric_name: str, labels: Dict[str, str], amount: int = 1):
        """Thread-safe increment of counter."""
        key = self._get_counter_key(metric_name, labels)
        with self._lock:
            self._counters[key] = self._counters.get(key, 0) + amount
    
    def _get_value(self, metric_name: str, labels: Dict[str, str]) -> int:
        """Get current value of counter."""
        key = self._get_counter_key(metric_name, labels)
        with self._lock:
            return self._counters.get(key, 0)
    
    # ===== Scheduling Metrics =====
    
    def increment_appointments_scheduled(self, source: str = "scheduler", amount: int = 1):
        """
        Increment appointments produced counter.
        
        Args:
            source: Producer of the appointments (scheduler, rescheduler)
            amount: Increment amount (default 1)
        """
        if amount <= 0:
            return
        self._increment("appointments_scheduled_total", {"source": source.lower()}, amount)
    
    def increment_scheduling_runs(self, outcome: str, amount: int = 1):
        """Increment single-customer generation runs (outcome: full, partial, failed)."""
        self._increment("scheduling_runs_total", {"outcome": outcome.lower()}, amount)
    
    def increment_conflicts(self, conflict_type: str, amount: int = 1):
        """Increment conflicts reported by the conflict detector."""
        self._increment("conflicts_detected_total", {"type": conflict_type.lower()}, amount)
    
    def increment_reschedules(self, outcome: str, rescheduled_by: str = "system", amount: int = 1):
        """Increment reschedule attempts (outcome: success, no_slot, conflict, error)."""
        labels = {
            "outcome": outcome.lower(),
            "rescheduled_by": rescheduled_by.lower(),
        }
        self._increment("reschedules_total", labels, amount)
    
    # ===== Export =====
    
    def export_prometheus(self) -> str:
        """
        Export all metrics in Prometheus text format.
        
        Returns:
            Prometheus-compatible text output
        """
        output_lines = []
        
        # Group counters by metric name
        metrics_by_name: Dict[str, list] = {}
        with self._lock:
            for (metric_name, labels_tuple), value in self._counters.items():
                if metric_name not in metrics_by_name:
                    metrics_by_name[metric_name] = []
                metrics_by_name[metric_name].append((dict(labels_tuple), value))
        
        # Generate Prometheus format for each metric
        for metric_name in sorted(metrics_by_name.keys()):
            help_text = self._get_help_text(metric_name)
            output_lines.append(f"# HELP {metric_name} {help_text}")
            output_lines.append(f"# TYPE {metric_name} counter")
            
            for labels_dict, value in sorted(metrics_by_name[metric_name], key=lambda x: str(x[0])):
                labels_str = ",".join([f'{k}="{v}"' for k, v in sorted(labels_dict.items())])
                output_lines.append(f"{metric_name}{{{labels_str}}} {value}")
            
            output_lines.append("")  # Blank line between metrics
        
        return "\n".join(output_lines)
    
    def _get_help_text(self, metric_name: str) -> str:
        """Get help text for metric."""
        help_texts = {
            "appointments_scheduled_total": "Total number of appointments produced by the engine",
            "scheduling_runs_total": "Total number of single-customer schedule generations",
            "conflicts_detected_total": "Total number of conflicts reported by the conflict detector",
            "reschedules_total": "Total number of reschedule attempts",
        }
        return help_texts.get(metric_name, "Counter metric")
    
    def get_counter_value(self, metric_name: str, labels: Dict[str, str]) -> int:
        """
        Get current value of a specific counter.
        
        Args:
            metric_name: Name of the metric
            labels: Label filters
        
        Returns:
            Current counter value
        """
        return self._get_value(metric_name, labels)
    
    def reset_all(self):
        """Reset all counters (for testing)."""
        with self._lock:
            self._counters.clear()


# Global singleton instance
_metrics_collector: Optional[MetricsCollector] = None
_metrics_lock = Lock()


def get_metrics_collector() -> MetricsCollector:
    """
    Get global metrics collector singleton.
    
    Returns:
        MetricsCollector instance
    """
    global _metrics_collector
    if _metrics_collector is None:
        with _metrics_lock:
            if _metrics_collector is None:
                _metrics_collector = MetricsCollector()
    return _metrics_collector


def reset_metrics():
    """Reset global metrics collector (for testing)."""
    global _metrics_collector
    with _metrics_lock:
        if _metrics_collector is not None:
            _metrics_collector.reset_all()
