"""Prometheus metrics sink for the User API Service.

All counters, gauges, histograms and helper methods for tracking API
calls, entity lifecycle events, logins, latency and payload sizes. Each
sink owns its own CollectorRegistry so it can be constructed per
application (and per test) without duplicate-registration errors.
"""

import logging
import math
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, Info

logger = logging.getLogger(__name__)

PERCENTILES = (0.5, 0.95, 0.99)

TIME_BUCKETS = (0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)
SIZE_BUCKETS = (64, 128, 256, 512, 1024, 2048, 4096, 8192, 16384, 65536, 262144, 1048576)


@dataclass(frozen=True)
class TimerSample:
    """A started timer; pass it back to the matching stop method."""

    started_at: float

    def elapsed(self) -> float:
        return time.perf_counter() - self.started_at


class MetricsSink:
    """Process-wide counters, gauges, timers and size distributions."""

    def __init__(
        self,
        registry: Optional[CollectorRegistry] = None,
        application: str = "user-api",
        version: str = "1.0.0",
        environment: str = "development",
    ):
        self.registry = registry or CollectorRegistry()

        self.application_info = Info(
            "application",
            "Application identity",
            registry=self.registry,
        )
        self.application_info.info(
            {"application": application, "version": version, "environment": environment}
        )

        # Counters
        self.total_api_calls = Counter(
            "api_calls", "Total number of API calls", registry=self.registry
        )
        self.successful_api_calls = Counter(
            "api_calls_successful",
            "Total number of successful API calls",
            registry=self.registry,
        )
        self.failed_api_calls = Counter(
            "api_calls_failed", "Total number of failed API calls", registry=self.registry
        )
        self.users_created = Counter(
            "users_created", "Total number of users created", registry=self.registry
        )
        self.users_updated = Counter(
            "users_updated", "Total number of users updated", registry=self.registry
        )
        self.users_deleted = Counter(
            "users_deleted", "Total number of users deleted", registry=self.registry
        )
        self.login_attempts = Counter(
            "login_attempts", "Total number of login attempts", registry=self.registry
        )
        self.login_success = Counter(
            "login_success", "Total number of successful logins", registry=self.registry
        )
        self.login_failure = Counter(
            "login_failure", "Total number of failed logins", registry=self.registry
        )

        # Gauges
        self.active_users = Gauge(
            "active_users", "Number of active users", registry=self.registry
        )
        self.total_users = Gauge("total_users", "Number of users", registry=self.registry)

        # Histograms
        self.api_response_time = Histogram(
            "api_response_time_seconds",
            "API response time in seconds",
            buckets=TIME_BUCKETS,
            registry=self.registry,
        )
        self.database_query_time = Histogram(
            "database_query_time_seconds",
            "Database query execution time in seconds",
            buckets=TIME_BUCKETS,
            registry=self.registry,
        )
        self.request_size = Histogram(
            "request_size_bytes",
            "Request size in bytes",
            buckets=SIZE_BUCKETS,
            registry=self.registry,
        )
        self.response_size = Histogram(
            "response_size_bytes",
            "Response size in bytes",
            buckets=SIZE_BUCKETS,
            registry=self.registry,
        )

        # Business gauges, registered lazily by name
        self._business_lock = threading.Lock()
        self._business_gauges: dict[str, tuple[Gauge, tuple[str, ...]]] = {}

    def record_api_call(self, success: bool) -> None:
        """Count an API call as successful or failed."""
        self.total_api_calls.inc()
        if success:
            self.successful_api_calls.inc()
        else:
            self.failed_api_calls.inc()

    def record_user_created(self) -> None:
        self.users_created.inc()

    def record_user_updated(self) -> None:
        self.users_updated.inc()

    def record_user_deleted(self) -> None:
        self.users_deleted.inc()

    def record_login_attempt(self, success: bool) -> None:
        """Count a login attempt and its outcome."""
        self.login_attempts.inc()
        if success:
            self.login_success.inc()
        else:
            self.login_failure.inc()

    def set_active_users(self, count: int) -> None:
        self.active_users.set(count)

    def set_total_users(self, count: int) -> None:
        self.total_users.set(count)

    def start_api_response_timer(self) -> TimerSample:
        return TimerSample(time.perf_counter())

    def stop_api_response_timer(self, sample: TimerSample) -> None:
        self.api_response_time.observe(sample.elapsed())

    def start_database_query_timer(self) -> TimerSample:
        return TimerSample(time.perf_counter())

    def stop_database_query_timer(self, sample: TimerSample) -> None:
        self.database_query_time.observe(sample.elapsed())

    @contextmanager
    def time_database_query(self) -> Iterator[TimerSample]:
        """Time the enclosed block into the database query histogram."""
        sample = self.start_database_query_timer()
        try:
            yield sample
        finally:
            self.stop_database_query_timer(sample)

    def record_request_size(self, size_in_bytes: int) -> None:
        self.request_size.observe(size_in_bytes)

    def record_response_size(self, size_in_bytes: int) -> None:
        self.response_size.observe(size_in_bytes)

    def record_business_metric(self, name: str, value: float, **tags: object) -> None:
        """
        Set the ``business_<name>`` gauge.

        Label keys are fixed by the first call for a name. Later calls are
        normalised to those keys: missing labels become "" and extra ones
        are dropped.
        """
        with self._business_lock:
            entry = self._business_gauges.get(name)
            if entry is None:
                labelnames = tuple(sorted(tags))
                gauge = Gauge(
                    f"business_{name}",
                    f"Business metric: {name}",
                    labelnames=labelnames,
                    registry=self.registry,
                )
                entry = (gauge, labelnames)
                self._business_gauges[name] = entry

        gauge, labelnames = entry
        if set(tags) != set(labelnames):
            logger.debug(
                f"Business metric {name} expects labels {labelnames}, got {sorted(tags)}"
            )
        if labelnames:
            values = {label: "" if tags.get(label) is None else str(tags[label]) for label in labelnames}
            gauge.labels(**values).set(value)
        else:
            gauge.set(value)

    def business_metric_value(self, name: str, **tags: object) -> Optional[float]:
        """Current value of a business gauge, or None if never recorded."""
        labels = {key: str(value) for key, value in tags.items()}
        return self.registry.get_sample_value(f"business_{name}", labels)

    def percentiles(self, histogram: Histogram) -> dict[str, float]:
        """
        Estimate p50/p95/p99 from a histogram's cumulative buckets.

        Uses linear interpolation inside the bucket holding the rank, the
        way Prometheus' ``histogram_quantile`` does. Returns NaN for each
        percentile when nothing has been observed.
        """
        buckets: list[tuple[float, float]] = []
        for metric in histogram.collect():
            for sample in metric.samples:
                if sample.name.endswith("_bucket"):
                    buckets.append((float(sample.labels["le"]), sample.value))
        buckets.sort()

        total = buckets[-1][1] if buckets else 0.0
        result = {}
        for quantile in PERCENTILES:
            key = f"p{round(quantile * 100)}"
            if total == 0:
                result[key] = math.nan
                continue
            rank = quantile * total
            lower_bound, lower_count = 0.0, 0.0
            for upper_bound, count in buckets:
                if count >= rank:
                    if math.isinf(upper_bound):
                        result[key] = lower_bound
                    elif count == lower_count:
                        result[key] = upper_bound
                    else:
                        fraction = (rank - lower_count) / (count - lower_count)
                        result[key] = lower_bound + (upper_bound - lower_bound) * fraction
                    break
                lower_bound, lower_count = upper_bound, count
        return result

    def get_metrics_summary(self) -> str:
        """Render current counter and gauge values as text."""
        return (
            "Metrics Summary:\n"
            f"- Total API Calls: {int(self._value(self.total_api_calls))}\n"
            f"- Successful API Calls: {int(self._value(self.successful_api_calls))}\n"
            f"- Failed API Calls: {int(self._value(self.failed_api_calls))}\n"
            f"- Active Users: {int(self._value(self.active_users))}\n"
            f"- Total Users: {int(self._value(self.total_users))}"
        )

    @staticmethod
    def _value(metric) -> float:
        """Read the unlabelled value of a counter or gauge."""
        for family in metric.collect():
            for sample in family.samples:
                if sample.name in (family.name, f"{family.name}_total"):
                    return sample.value
        return 0.0
