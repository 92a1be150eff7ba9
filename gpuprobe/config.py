"""Probe configuration injected into the detector and every adapter."""

import json
import math
import os
import sys
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, Optional

import yaml

from gpuprobe.errors import ConfigError
from gpuprobe.runner import DEFAULT_TIMEOUT_SECONDS, run_command

DEFAULT_PROBE_TIMEOUT_SECONDS = 3.0
DEFAULT_ENV = {"CUDA_DEVICE_ORDER": "PCI_BUS_ID"}

_FILE_KEYS = (
    "nvidia_smi",
    "amd_smi",
    "timeout_seconds",
    "probe_timeout_seconds",
    "env",
    "platform",
)


@dataclass
class ProbeConfig:
    """Tool names, timeouts and the process runner used by one query.

    Attributes:
        nvidia_smi: NVIDIA query tool executable (name on PATH or full path)
        amd_smi: AMD management tool executable
        timeout_seconds: Upper bound for each vendor query invocation
        probe_timeout_seconds: Upper bound for each presence probe
        env: Extra environment for child processes
        platform: sys.platform override; None means the running interpreter's
        runner: Callable(argv, timeout, env) -> CommandResult
    """

    nvidia_smi: str = "nvidia-smi"
    amd_smi: str = "amd-smi"
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    probe_timeout_seconds: float = DEFAULT_PROBE_TIMEOUT_SECONDS
    env: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_ENV))
    platform: Optional[str] = None
    runner: Callable[..., Any] = run_command

    def __post_init__(self) -> None:
        for name in ("timeout_seconds", "probe_timeout_seconds"):
            try:
                value = float(getattr(self, name))
            except (TypeError, ValueError) as exc:
                raise ConfigError(f"{name} must be a number") from exc
            if not math.isfinite(value) or value <= 0:
                raise ConfigError(f"{name} must be a positive finite number, got {value}")
            setattr(self, name, value)
        for name in ("nvidia_smi", "amd_smi"):
            if not isinstance(getattr(self, name), str) or not getattr(self, name).strip():
                raise ConfigError(f"{name} must be a non-empty string")
        if not isinstance(self.env, dict):
            raise ConfigError("env must be a mapping of variable names to values")
        self.env = {str(k): str(v) for k, v in self.env.items()}

    @property
    def is_windows(self) -> bool:
        return (self.platform or sys.platform) == "win32"

    def with_overrides(self, **overrides: Any) -> "ProbeConfig":
        """Return a copy with non-None overrides applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes) if changes else self

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProbeConfig":
        """Build a config from file data, merging values over the defaults.

        A top-level ``gpuprobe`` section is used when present. ``env`` is
        merged with the default environment rather than replacing it.
        """
        if not isinstance(data, dict):
            raise ConfigError("Configuration must be a mapping")
        section = data.get("gpuprobe", data)
        if not isinstance(section, dict):
            raise ConfigError("'gpuprobe' section must be a mapping")
        unknown = sorted(set(section) - set(_FILE_KEYS))
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

        values = dict(section)
        if "env" in values:
            if not isinstance(values["env"], dict):
                raise ConfigError("env must be a mapping of variable names to values")
            values["env"] = {**DEFAULT_ENV, **values["env"]}
        return cls(**values)


def _load_config_file(filepath: str) -> Dict[str, Any]:
    """Load a YAML or JSON config file, choosing the parser by extension.

    Returns:
        Loaded config as dict; empty dict if the file is empty
    """
    if filepath.endswith((".yaml", ".yml")):
        loader = yaml.safe_load
    elif filepath.endswith(".json"):
        loader = json.load
    else:
        raise ValueError(f"Unsupported config file type: {filepath}")
    with open(filepath, encoding="utf-8") as f:
        data = loader(f)
    return data if data is not None else {}

def load_probe_config(filepath: Optional[str] = None) -> ProbeConfig:
    """Load configuration from a YAML/JSON file, or return defaults.

    Args:
        filepath: Optional path to a .yaml/.yml/.json file

    Returns:
        ProbeConfig

    Raises:
        ConfigError: If the file is missing, unreadable, or invalid
    """
    if not filepath:
        return ProbeConfig()
    if not os.path.exists(filepath):
        raise ConfigError(f"Config file not found: {filepath}")
    try:
        data = _load_config_file(filepath)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        raise ConfigError(f"Could not read config file {filepath}: {exc}") from exc
    return ProbeConfig.from_dict(data)
