"""Normalized telemetry schema returned by every capability path.

All objects are built fresh for one query and discarded after
serialization. ``to_dict`` produces the JSON wire form.
"""

import enum
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional


class Capability(enum.Enum):
    """Which vendor path produced the device list."""

    NVIDIA = "nvidia"
    AMD = "amd"
    NONE = "none"


@dataclass
class Utilization:
    gpu: float = 0
    memory: float = 0


@dataclass
class MemoryInfo:
    """VRAM in MiB. used + free is not guaranteed to equal total."""

    total: float = 0
    used: float = 0
    free: float = 0


@dataclass
class PowerInfo:
    draw: float = 0.0
    limit: float = 0.0


@dataclass
class ClockInfo:
    graphics: float = 0
    memory: float = 0


@dataclass
class FanInfo:
    speed: float = 0
    unit: str = "percent"


@dataclass
class DeviceRecord:
    """One GPU as reported by a single poll."""

    index: int
    name: str
    driver_version: str
    temperature: float = 0
    utilization: Utilization = field(default_factory=Utilization)
    memory: MemoryInfo = field(default_factory=MemoryInfo)
    power: PowerInfo = field(default_factory=PowerInfo)
    clocks: ClockInfo = field(default_factory=ClockInfo)
    fan: FanInfo = field(default_factory=FanInfo)

    def to_dict(self) -> Dict[str, Any]:
        """Export as dict for JSON."""
        return {
            "index": self.index,
            "name": self.name,
            "driverVersion": self.driver_version,
            "temperature": self.temperature,
            "utilization": asdict(self.utilization),
            "memory": asdict(self.memory),
            "power": asdict(self.power),
            "clocks": asdict(self.clocks),
            "fan": asdict(self.fan),
        }


@dataclass
class CpuSummary:
    """Host CPU identity and metrics used when no GPU tooling is present."""

    name: str
    cores: int
    speed: float  # GHz
    temperature: float = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ResponseEnvelope:
    """Unified query result; at most one capability flag is true."""

    has_nvidia_smi: bool = False
    has_amd_smi: bool = False
    gpus: List[DeviceRecord] = field(default_factory=list)
    cpu: Optional[CpuSummary] = None
    error: Optional[str] = None

    def __post_init__(self) -> None:
        if self.has_nvidia_smi and self.has_amd_smi:
            raise ValueError("At most one capability flag may be set")

    @property
    def capability(self) -> Capability:
        if self.has_nvidia_smi:
            return Capability.NVIDIA
        if self.has_amd_smi:
            return Capability.AMD
        return Capability.NONE

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def status_code(self) -> int:
        return 200 if self.ok else 500

    @classmethod
    def for_capability(
        cls, capability: Capability, gpus: List[DeviceRecord]
    ) -> "ResponseEnvelope":
        return cls(
            has_nvidia_smi=capability is Capability.NVIDIA,
            has_amd_smi=capability is Capability.AMD,
            gpus=list(gpus),
        )

    @classmethod
    def failure(cls, message: str) -> "ResponseEnvelope":
        return cls(error=message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-serializable dictionary; cpu/error only when set."""
        payload: Dict[str, Any] = {
            "hasNvidiaSmi": self.has_nvidia_smi,
            "hasAmdSmi": self.has_amd_smi,
            "gpus": [gpu.to_dict() for gpu in self.gpus],
        }
        if self.cpu is not None:
            payload["cpu"] = self.cpu.to_dict()
        if self.error is not None:
            payload["error"] = self.error
        return payload
