"""gpuprobe: one-shot, vendor-neutral GPU telemetry.

Provides:
- service (get_gpu_stats)
- detect (detect, probe_nvidia, probe_amd)
- nvidia / amd / cpu adapters
- schema (DeviceRecord, CpuSummary, ResponseEnvelope, Capability)
- config (ProbeConfig, load_probe_config)
"""

from gpuprobe.amd import query_amd
from gpuprobe.config import ProbeConfig, load_probe_config
from gpuprobe.cpu import query_cpu
from gpuprobe.detect import detect, probe_amd, probe_nvidia
from gpuprobe.errors import (
    ConfigError,
    GpuProbeError,
    MalformedRecordError,
    PartialDataUnavailableError,
    QueryError,
    ToolNotFoundError,
)
from gpuprobe.nvidia import query_nvidia
from gpuprobe.parsing import to_float, to_int
from gpuprobe.runner import CommandResult, run_command
from gpuprobe.schema import (
    Capability,
    ClockInfo,
    CpuSummary,
    DeviceRecord,
    FanInfo,
    MemoryInfo,
    PowerInfo,
    ResponseEnvelope,
    Utilization,
)
from gpuprobe.service import get_gpu_stats

__all__ = [
    # Query
    "get_gpu_stats",
    "detect",
    "probe_nvidia",
    "probe_amd",
    "query_nvidia",
    "query_amd",
    "query_cpu",
    # Config
    "ProbeConfig",
    "load_probe_config",
    # Process execution
    "CommandResult",
    "run_command",
    # Parsing
    "to_float",
    "to_int",
    # Schema
    "Capability",
    "DeviceRecord",
    "Utilization",
    "MemoryInfo",
    "PowerInfo",
    "ClockInfo",
    "FanInfo",
    "CpuSummary",
    "ResponseEnvelope",
    # Errors
    "GpuProbeError",
    "ToolNotFoundError",
    "QueryError",
    "MalformedRecordError",
    "PartialDataUnavailableError",
    "ConfigError",
]
