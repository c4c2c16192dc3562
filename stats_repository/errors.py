"""Exceptions raised by the statistics repository."""


class StatisticsError(Exception):
    """Base class for caller-facing statistics failures."""


class AnalysisError(StatisticsError):
    """A statement could not be analyzed (unknown table, column, partition or bad value)."""


class DdlError(StatisticsError):
    """A write or delete against the statistics tables failed."""


class StatisticsExecutionError(StatisticsError):
    """The backing store failed to run a query or update."""


class StatisticsConsistencyError(RuntimeError):
    """A statistic id expected to be unique matched more than one row."""
