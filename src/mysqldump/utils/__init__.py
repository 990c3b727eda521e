"""
Ambient utilities for dump and replay runs

Provides:
- logging: console/JSON logging setup and ContextLogger
- tracing: OpenTelemetry spans around database work
- metrics: Prometheus counters for exports and replays
- sql_safety: identifier quoting and option validation
"""

__all__ = ["logging", "tracing", "metrics", "sql_safety"]
