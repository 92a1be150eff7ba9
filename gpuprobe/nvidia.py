"""GPU telemetry via nvidia-smi CSV queries."""

import logging
from typing import List

from gpuprobe.config import ProbeConfig
from gpuprobe.errors import MalformedRecordError
from gpuprobe.parsing import to_float, to_int
from gpuprobe.runner import run_tool
from gpuprobe.schema import (
    ClockInfo,
    DeviceRecord,
    FanInfo,
    MemoryInfo,
    PowerInfo,
    Utilization,
)

logger = logging.getLogger(__name__)

# Column order of the CSV output; parse_nvidia_line depends on it.
NVIDIA_QUERY_FIELDS = [
    "index",
    "name",
    "driver_version",
    "temperature.gpu",
    "utilization.gpu",
    "utilization.memory",
    "memory.total",
    "memory.free",
    "memory.used",
    "power.draw",
    "power.limit",
    "clocks.current.graphics",
    "clocks.current.memory",
    "fan.speed",
]


def nvidia_query_command(config: ProbeConfig) -> List[str]:
    return [
        config.nvidia_smi,
        f"--query-gpu={','.join(NVIDIA_QUERY_FIELDS)}",
        "--format=csv,noheader,nounits",
    ]


def parse_nvidia_line(line: str, separator: str = ",") -> DeviceRecord:
    """Parse one nvidia-smi CSV line into a DeviceRecord.

    Raises:
        MalformedRecordError: If the line does not have one value per queried field
    """
    values = [v.strip() for v in line.split(separator)]
    if len(values) != len(NVIDIA_QUERY_FIELDS):
        raise MalformedRecordError(
            f"Expected {len(NVIDIA_QUERY_FIELDS)} fields, got {len(values)}: {line!r}"
        )
    (
        index,
        name,
        driver_version,
        temperature,
        gpu_util,
        memory_util,
        memory_total,
        memory_free,
        memory_used,
        power_draw,
        power_limit,
        clock_graphics,
        clock_memory,
        fan_speed,
    ) = values

    return DeviceRecord(
        index=to_int(index),
        name=name,
        driver_version=driver_version,
        temperature=to_int(temperature),
        utilization=Utilization(gpu=to_int(gpu_util), memory=to_int(memory_util)),
        memory=MemoryInfo(
            total=to_int(memory_total),
            used=to_int(memory_used),
            free=to_int(memory_free),
        ),
        power=PowerInfo(draw=to_float(power_draw), limit=to_float(power_limit)),
        clocks=ClockInfo(graphics=to_int(clock_graphics), memory=to_int(clock_memory)),
        fan=FanInfo(speed=to_int(fan_speed), unit="percent"),
    )


def parse_nvidia_csv(output: str) -> List[DeviceRecord]:
    """Parse nvidia-smi CSV output (no header) into records, skipping malformed lines."""
    devices: List[DeviceRecord] = []
    for line in output.strip().splitlines():
        if not line.strip():
            continue
        try:
            devices.append(parse_nvidia_line(line))
        except MalformedRecordError as exc:
            logger.warning("Skipping malformed nvidia-smi line: %s", exc)
    return devices


def query_nvidia(config: ProbeConfig) -> List[DeviceRecord]:
    """Query all NVIDIA GPUs.

    Raises:
        QueryError: If nvidia-smi fails, exits non-zero, or times out
    """
    output = run_tool(config, nvidia_query_command(config))
    return parse_nvidia_csv(output)
