"""Host CPU summary used when no GPU tooling is available."""

import logging
import os
import platform
import re
from typing import Optional

import psutil

from gpuprobe.config import ProbeConfig
from gpuprobe.schema import CpuSummary

logger = logging.getLogger(__name__)

PROC_CPUINFO = "/proc/cpuinfo"

# Sensor groups checked first; any other group is used as a last resort.
_PREFERRED_SENSORS = ("coretemp", "k10temp", "zenpower", "cpu_thermal", "acpitz")


def _cpu_brand() -> str:
    """Get the CPU brand string from /proc/cpuinfo, then platform."""
    if os.path.isfile(PROC_CPUINFO):
        try:
            with open(PROC_CPUINFO, "r", encoding="utf-8", errors="replace") as f:
                match = re.search(r"^model name\s*:\s*(.+)$", f.read(), re.MULTILINE)
            if match:
                return match.group(1).strip()
        except OSError:
            pass
    return (platform.processor() or platform.machine() or "Unknown CPU").strip()


def _cpu_speed_ghz() -> float:
    freq = psutil.cpu_freq()
    if freq is None:
        return 0.0
    mhz = freq.max if not freq.current and freq.max else freq.current
    return round(float(mhz or 0) / 1000.0, 2)


def _cpu_temperature() -> float:
    """First available package temperature in °C; 0 when no sensor is exposed."""
    read_sensors = getattr(psutil, "sensors_temperatures", None)
    if read_sensors is None:
        return 0.0
    try:
        temps = read_sensors() or {}
    except (OSError, RuntimeError):
        return 0.0
    ordered = [name for name in _PREFERRED_SENSORS if name in temps]
    ordered += [name for name in temps if name not in ordered]
    for name in ordered:
        for entry in temps[name]:
            current = getattr(entry, "current", None)
            if current:
                return float(current)
    return 0.0


def query_cpu(config: Optional[ProbeConfig] = None) -> Optional[CpuSummary]:
    """Summarize the host CPU; returns None instead of raising on any failure.

    ``config`` keeps the adapter signature uniform; psutil needs no tool settings.
    """
    try:
        cores = psutil.cpu_count(logical=False) or psutil.cpu_count() or 0
        return CpuSummary(
            name=_cpu_brand(),
            cores=int(cores),
            speed=_cpu_speed_ghz(),
            temperature=_cpu_temperature(),
        )
    except Exception:
        logger.debug("CPU summary unavailable", exc_info=True)
        return None
