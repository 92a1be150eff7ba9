"""GPU telemetry via amd-smi static and metric JSON queries.

amd-smi reports device identity (``static``) and live telemetry
(``metric``) as two datasets, so two calls are made and joined per device.
The top-level JSON shape differs across amd-smi releases: older versions
print a bare list of devices, newer ones wrap it as ``{"gpu_data": [...]}``.

The join is positional: a static record's ``gpu`` index selects the entry
at that position of the metric list. This assumes both calls enumerate
devices in the same order. When a metric entry carries its own ``gpu``
field and it disagrees, the entry with the matching ``gpu`` is used
instead, and telemetry is zeroed if there is none.
"""

import enum
import json
import logging
from typing import Any, Dict, List, Tuple

from gpuprobe.config import ProbeConfig
from gpuprobe.errors import MalformedRecordError, PartialDataUnavailableError, QueryError
from gpuprobe.parsing import parse_number, resolve_index, safe_get, to_float, to_int
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

WRAPPED_DEVICES_KEY = "gpu_data"
DEFAULT_AMD_NAME = "AMD GPU"
DEFAULT_DRIVER_VERSION = "N/A"


class JsonShape(enum.Enum):
    BARE_ARRAY = "bare-array"
    WRAPPED_OBJECT = "wrapped-object"
    UNRECOGNIZED = "unrecognized"


def classify_payload(data: Any) -> Tuple[JsonShape, List[Any]]:
    """Decide the top-level shape of an amd-smi JSON document once."""
    if isinstance(data, list):
        return JsonShape.BARE_ARRAY, data
    if isinstance(data, dict) and isinstance(data.get(WRAPPED_DEVICES_KEY), list):
        return JsonShape.WRAPPED_OBJECT, data[WRAPPED_DEVICES_KEY]
    return JsonShape.UNRECOGNIZED, []


def normalize_payload(data: Any) -> List[Any]:
    """Return the ordered device list of either known shape, [] otherwise."""
    shape, devices = classify_payload(data)
    if shape is JsonShape.UNRECOGNIZED:
        logger.warning("Unrecognized amd-smi JSON shape: %s", type(data).__name__)
    return list(devices)


def parse_amd_json(text: str) -> List[Any]:
    """Parse amd-smi JSON text into an ordered device list; never raises."""
    if not text or not text.strip():
        return []
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        logger.warning("Failed to parse amd-smi JSON output: %s", exc)
        return []
    return normalize_payload(data)


def memory_utilization(used: float, total: float) -> float:
    """Percentage of VRAM in use; 0 when total is not positive."""
    return used / total * 100 if total > 0 else 0.0


def _select_metrics(metric_gpus: List[Any], index: int) -> Dict[str, Any]:
    candidate = metric_gpus[index] if index < len(metric_gpus) else None
    if not isinstance(candidate, dict):
        return {}
    if "gpu" not in candidate or resolve_index(candidate["gpu"]) == index:
        return candidate

    for entry in metric_gpus:
        if isinstance(entry, dict) and resolve_index(entry.get("gpu")) == index:
            logger.warning(
                "amd-smi metric order differs from static order; matched GPU %d by index",
                index,
            )
            return entry
    logger.warning("No amd-smi metrics match GPU %d; telemetry zeroed", index)
    return {}


def build_amd_record(static: Any, metric_gpus: List[Any]) -> DeviceRecord:
    """Join one static record with its metrics into a DeviceRecord.

    Raises:
        MalformedRecordError: If the static entry is not an object or its index is negative
    """
    if not isinstance(static, dict):
        raise MalformedRecordError(f"amd-smi static entry is not an object: {static!r}")
    # Missing or non-numeric indexes default to 0, like every other field.
    index = to_int(static.get("gpu"))
    if index < 0:
        raise MalformedRecordError(f"amd-smi static entry has negative gpu index: {index}")

    m = _select_metrics(metric_gpus, index)

    mem_total = to_float(safe_get(m, "mem_usage", "total_vram", "value"))
    mem_used = to_float(safe_get(m, "mem_usage", "used_vram", "value"))
    mem_free = to_float(safe_get(m, "mem_usage", "free_visible_vram", "value"))
    temperature = safe_get(m, "temperature", "hotspot", "value")
    if parse_number(temperature) is None:
        temperature = safe_get(m, "temperature", "edge", "value")

    return DeviceRecord(
        index=index,
        name=str(safe_get(static, "asic", "market_name", default=DEFAULT_AMD_NAME)),
        driver_version=str(safe_get(static, "driver", "version", default=DEFAULT_DRIVER_VERSION)),
        temperature=to_int(temperature),
        utilization=Utilization(
            gpu=to_int(safe_get(m, "usage", "gfx_activity", "value")),
            memory=memory_utilization(mem_used, mem_total),
        ),
        memory=MemoryInfo(total=mem_total, used=mem_used, free=mem_free),
        power=PowerInfo(
            draw=to_float(safe_get(m, "power", "socket_power", "value")),
            limit=to_float(safe_get(static, "limit", "max_power", "value")),
        ),
        clocks=ClockInfo(
            graphics=to_int(safe_get(m, "clock", "gfx_0", "clk", "value")),
            memory=to_int(safe_get(m, "clock", "mem_0", "clk", "value")),
        ),
        fan=FanInfo(speed=to_float(safe_get(m, "fan", "usage", "value")), unit="percent"),
    )


def join_amd_devices(static_gpus: List[Any], metric_gpus: List[Any]) -> List[DeviceRecord]:
    """Join static and metric device lists; static records drive the join."""
    devices: List[DeviceRecord] = []
    seen = set()
    for static in static_gpus:
        try:
            record = build_amd_record(static, metric_gpus)
        except MalformedRecordError as exc:
            logger.warning("Dropping amd-smi device: %s", exc)
            continue
        if record.index in seen:
            logger.warning("Dropping amd-smi device: duplicate gpu index %d", record.index)
            continue
        seen.add(record.index)
        devices.append(record)
    return devices


def _query_metrics(config: ProbeConfig) -> List[Any]:
    try:
        output = run_tool(config, [config.amd_smi, "metric", "--json"])
    except QueryError as exc:
        raise PartialDataUnavailableError(f"amd-smi metric query failed: {exc}") from exc
    return parse_amd_json(output)


def query_amd(config: ProbeConfig) -> List[DeviceRecord]:
    """Query all AMD GPUs.

    Raises:
        QueryError: If the amd-smi static query fails, exits non-zero, or times out
    """
    static_gpus = parse_amd_json(run_tool(config, [config.amd_smi, "static", "--json"]))
    try:
        metric_gpus = _query_metrics(config)
    except PartialDataUnavailableError as exc:
        logger.warning("%s; reporting static data only", exc)
        metric_gpus = []
    return join_amd_devices(static_gpus, metric_gpus)
