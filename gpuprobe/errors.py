"""Custom exceptions for gpuprobe.

Adapters raise these so the orchestrator can tell an expected absence
(no vendor tool installed) from a failed query, and so tolerated defects
can be logged with a consistent type.
"""

from typing import Optional, Sequence


class GpuProbeError(Exception):
    """Base exception for all gpuprobe errors."""

    pass


class ToolNotFoundError(GpuProbeError):
    """Raised when a vendor tool probe fails (not on PATH, non-zero exit, or timeout)."""

    pass


class QueryError(GpuProbeError):
    """Raised when a vendor tool invocation fails, exits non-zero, or times out."""

    def __init__(
        self,
        message: str,
        command: Optional[Sequence[str]] = None,
        returncode: Optional[int] = None,
    ):
        super().__init__(message)
        self.command = list(command) if command else []
        self.returncode = returncode


class MalformedRecordError(GpuProbeError):
    """Raised when a single output line or record cannot be mapped to a device."""

    pass


class PartialDataUnavailableError(GpuProbeError):
    """Raised when one of the two AMD queries failed and data is degraded."""

    pass


class ConfigError(GpuProbeError):
    """Raised when configuration is invalid or a config file cannot be read."""

    pass
