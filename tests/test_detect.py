"""Tests for vendor tool detection."""

import pytest

from conftest import timeout_error
from gpuprobe.detect import detect, probe_amd, probe_nvidia
from gpuprobe.errors import ToolNotFoundError
from gpuprobe.schema import Capability


def test_nvidia_wins_over_amd(fake_config):
    config, runner = fake_config(
        {("which", "nvidia-smi"): "/usr/bin/nvidia-smi", ("which", "amd-smi"): "/usr/bin/amd-smi"}
    )
    assert detect(config) is Capability.NVIDIA
    assert runner.commands() == [("which", "nvidia-smi")]


def test_amd_when_nvidia_absent(fake_config):
    config, runner = fake_config({("which", "amd-smi"): "/usr/bin/amd-smi"})
    assert detect(config) is Capability.AMD
    assert runner.commands() == [("which", "nvidia-smi"), ("which", "amd-smi")]


def test_none_when_no_tools(fake_config):
    config, _ = fake_config()
    assert detect(config) is Capability.NONE


def test_probe_timeout_counts_as_absent(fake_config):
    config, _ = fake_config(
        {
            ("which", "nvidia-smi"): timeout_error("which", "nvidia-smi"),
            ("which", "amd-smi"): "/usr/bin/amd-smi",
        }
    )
    assert detect(config) is Capability.AMD


def test_probe_uses_probe_timeout(fake_config):
    config, runner = fake_config(probe_timeout_seconds=1.5)
    detect(config)
    assert all(timeout == 1.5 for _, timeout, _ in runner.calls)


def test_windows_probes_use_metadata_queries(fake_config):
    config, runner = fake_config({("amd-smi", "version"): "AMDSMI Tool: 24.6.2"}, platform="win32")
    assert detect(config) is Capability.AMD
    assert runner.commands() == [("nvidia-smi", "-L"), ("amd-smi", "version")]


def test_probe_raises_tool_not_found(fake_config):
    config, _ = fake_config()
    with pytest.raises(ToolNotFoundError):
        probe_nvidia(config)
    with pytest.raises(ToolNotFoundError):
        probe_amd(config)


def test_configured_tool_path_is_probed(fake_config):
    config, runner = fake_config(
        {("which", "/opt/nvidia/bin/nvidia-smi"): "/opt/nvidia/bin/nvidia-smi"},
        nvidia_smi="/opt/nvidia/bin/nvidia-smi",
    )
    assert detect(config) is Capability.NVIDIA


def test_detection_is_not_cached(fake_config):
    config, runner = fake_config({("which", "amd-smi"): "/usr/bin/amd-smi"})
    assert detect(config) is Capability.AMD
    runner.responses.pop(("which", "amd-smi"))
    assert detect(config) is Capability.NONE
