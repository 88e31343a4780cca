"""Scaler exception hierarchy."""


class AutoscalerError(Exception):
    """Base class for all scaler errors."""


class ConfigurationError(AutoscalerError):
    """The cluster request cannot be processed as configured. Fatal for the cycle."""


class UnknownEngineError(ConfigurationError):
    """The cluster engine is not one of the supported products."""

    def __init__(self, engine) -> None:
        self.engine = engine
        super().__init__(f"Unknown cluster engine: {engine}")


class MissingMetricError(ConfigurationError):
    """A metric required for a sizing decision was not collected."""

    def __init__(self, metric_name: str) -> None:
        self.metric_name = metric_name
        super().__init__(f"Cluster metrics had no {metric_name} field.")


class RuleSetError(ConfigurationError):
    """A scaling rule is malformed."""


class StateStorageError(AutoscalerError):
    """Reading or writing the persisted scaling state failed."""


class ClusterApiError(AutoscalerError):
    """The cluster control API rejected or failed a request."""


class OperationStatusError(ClusterApiError):
    """The status of a long-running operation could not be fetched or decoded."""
