"""Memory toolkit: event log, configuration, search telemetry, ranking and demo components."""

__version__ = "0.1.0"