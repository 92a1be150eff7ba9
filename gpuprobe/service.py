"""One-shot GPU stats query: detect, query the matching vendor, build the envelope.

``get_gpu_stats`` is the single recovery boundary. Any error escaping an
adapter becomes an envelope with ``error`` set; nothing propagates to the
caller.
"""

import logging
from typing import Optional

from gpuprobe.amd import query_amd
from gpuprobe.config import ProbeConfig
from gpuprobe.cpu import query_cpu
from gpuprobe.detect import detect
from gpuprobe.nvidia import query_nvidia
from gpuprobe.schema import Capability, ResponseEnvelope

logger = logging.getLogger(__name__)

GPU_ADAPTERS = {
    Capability.NVIDIA: query_nvidia,
    Capability.AMD: query_amd,
}


def _collect(config: ProbeConfig) -> ResponseEnvelope:
    capability = detect(config)
    adapter = GPU_ADAPTERS.get(capability)
    if adapter is None:
        envelope = ResponseEnvelope.for_capability(Capability.NONE, [])
        envelope.cpu = query_cpu(config)
        return envelope
    return ResponseEnvelope.for_capability(capability, adapter(config))


def get_gpu_stats(config: Optional[ProbeConfig] = None) -> ResponseEnvelope:
    """Report GPU telemetry for this host, or CPU info when no GPU tooling exists.

    Args:
        config: Tool names, timeouts and runner; defaults to ProbeConfig()

    Returns:
        ResponseEnvelope; ``error`` is populated instead of raising on failure
    """
    try:
        return _collect(config or ProbeConfig())
    except Exception as exc:
        logger.exception("Error fetching GPU stats")
        return ResponseEnvelope.failure(f"Failed to fetch GPU stats: {exc}")
