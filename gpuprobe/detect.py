"""Vendor tool detection.

Probes run in fixed priority order (NVIDIA, then AMD) and the first tool
found wins. Nothing is cached: drivers can be reloaded and tools can
appear or disappear between queries.
"""

import logging
from typing import List

from gpuprobe.config import ProbeConfig
from gpuprobe.errors import QueryError, ToolNotFoundError
from gpuprobe.schema import Capability

logger = logging.getLogger(__name__)


def _probe_command(config: ProbeConfig, tool: str, windows_args: List[str]) -> List[str]:
    # Windows has no `which`; a cheap metadata call doubles as the presence check.
    if config.is_windows:
        return [tool, *windows_args]
    return ["which", tool]


def _probe(config: ProbeConfig, command: List[str]) -> None:
    try:
        result = config.runner(command, config.probe_timeout_seconds, None)
    except QueryError as exc:
        raise ToolNotFoundError(str(exc)) from exc
    if not result.ok:
        raise ToolNotFoundError(
            f"{' '.join(command)} exited with status {result.returncode}"
        )


def probe_nvidia(config: ProbeConfig) -> None:
    """Check that nvidia-smi is available.

    Raises:
        ToolNotFoundError: If the probe exits non-zero, cannot run, or times out
    """
    _probe(config, _probe_command(config, config.nvidia_smi, ["-L"]))


def probe_amd(config: ProbeConfig) -> None:
    """Check that amd-smi is available.

    Raises:
        ToolNotFoundError: If the probe exits non-zero, cannot run, or times out
    """
    _probe(config, _probe_command(config, config.amd_smi, ["version"]))


def detect(config: ProbeConfig) -> Capability:
    """Return the capability of the first vendor tool found, or Capability.NONE."""
    probes = (
        (Capability.NVIDIA, probe_nvidia),
        (Capability.AMD, probe_amd),
    )
    for capability, probe in probes:
        try:
            probe(config)
        except ToolNotFoundError as exc:
            logger.debug("%s tooling not found: %s", capability.value, exc)
            continue
        logger.debug("Detected %s tooling", capability.value)
        return capability
    return Capability.NONE
