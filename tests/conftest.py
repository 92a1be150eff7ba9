"""Pytest configuration and fixtures."""

import json

import pytest

from gpuprobe.config import ProbeConfig
from gpuprobe.errors import QueryError
from gpuprobe.runner import CommandResult

NVIDIA_SCENARIO_LINE = (
    "0, RTX 4090, 535.1, 45, 12, 3, 24576, 20000, 4576, 120.5, 450.0, 2500, 10000, 55"
)


class FakeRunner:
    """Stands in for run_command; answers by argv and records every call.

    Responses map an argv tuple to a CommandResult, a string (stdout with
    exit status 0) or an exception instance to raise. Unknown commands
    exit with status 1.
    """

    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.calls = []

    def __call__(self, command, timeout, env):
        argv = tuple(command)
        self.calls.append((argv, timeout, env))
        response = self.responses.get(argv)
        if isinstance(response, BaseException):
            raise response
        if isinstance(response, CommandResult):
            return response
        if response is None:
            return CommandResult(command=list(argv), returncode=1, stdout="", stderr="not found")
        return CommandResult(command=list(argv), returncode=0, stdout=response)

    def commands(self):
        return [call[0] for call in self.calls]


def make_config(responses=None, **kwargs):
    runner = FakeRunner(responses)
    kwargs.setdefault("platform", "linux")
    return ProbeConfig(runner=runner, **kwargs), runner


@pytest.fixture
def fake_config():
    """Factory fixture: fake_config(responses, **config_kwargs) -> (config, runner)."""
    return make_config


@pytest.fixture
def amd_static_payload():
    """amd-smi static output for two GPUs (wrapped-object shape)."""
    return {
        "gpu_data": [
            {
                "gpu": 0,
                "asic": {"market_name": "AMD Instinct MI300X"},
                "driver": {"name": "amdgpu", "version": "6.8.5"},
                "limit": {"max_power": {"value": 750, "unit": "W"}},
            },
            {
                "gpu": "1",
                "asic": {"market_name": "AMD Instinct MI300X"},
                "driver": {"version": "6.8.5"},
                "limit": {"max_power": {"value": "750", "unit": "W"}},
            },
        ]
    }


@pytest.fixture
def amd_metric_payload():
    """amd-smi metric output for two GPUs (bare-array shape)."""
    return [
        {
            "gpu": 0,
            "usage": {"gfx_activity": {"value": 87, "unit": "%"}},
            "power": {"socket_power": {"value": 412.5, "unit": "W"}},
            "clock": {
                "gfx_0": {"clk": {"value": 2100, "unit": "MHz"}},
                "mem_0": {"clk": {"value": 1300, "unit": "MHz"}},
            },
            "temperature": {
                "edge": {"value": 48, "unit": "C"},
                "hotspot": {"value": 61, "unit": "C"},
            },
            "fan": {"usage": {"value": "N/A", "unit": "%"}},
            "mem_usage": {
                "total_vram": {"value": 196592, "unit": "MB"},
                "used_vram": {"value": 49148, "unit": "MB"},
                "free_visible_vram": {"value": 147444, "unit": "MB"},
            },
        },
        {
            "gpu": 1,
            "usage": {"gfx_activity": {"value": "3", "unit": "%"}},
            "power": {"socket_power": {"value": "N/A", "unit": "W"}},
            "temperature": {
                "edge": {"value": 35, "unit": "C"},
                "hotspot": {"value": "N/A", "unit": "C"},
            },
            "mem_usage": {
                "total_vram": {"value": 0, "unit": "MB"},
                "used_vram": {"value": 10, "unit": "MB"},
            },
        },
    ]


def amd_responses(static, metric):
    """Fake runner responses for a host where only amd-smi is installed."""
    responses = {
        ("which", "amd-smi"): "/opt/rocm/bin/amd-smi\n",
        ("amd-smi", "static", "--json"): static if isinstance(static, str) else json.dumps(static),
    }
    if isinstance(metric, BaseException):
        responses[("amd-smi", "metric", "--json")] = metric
    elif metric is not None:
        responses[("amd-smi", "metric", "--json")] = (
            metric if isinstance(metric, str) else json.dumps(metric)
        )
    return responses


def timeout_error(*command):
    return QueryError(f"{command[0]} timed out after 5.0s", command=list(command))
