"""Tests for the CPU fallback adapter."""

from collections import namedtuple

import pytest

from gpuprobe import cpu as cpu_mod
from gpuprobe.schema import CpuSummary

_Freq = namedtuple("_Freq", "current min max")
_Temp = namedtuple("_Temp", "label current high critical")


@pytest.fixture
def fake_psutil(monkeypatch):
    monkeypatch.setattr(cpu_mod.psutil, "cpu_count", lambda logical=True: 8 if not logical else 16)
    monkeypatch.setattr(cpu_mod.psutil, "cpu_freq", lambda: _Freq(3600.0, 800.0, 5000.0))
    monkeypatch.setattr(
        cpu_mod.psutil,
        "sensors_temperatures",
        lambda: {
            "nvme": [_Temp("Composite", 38.0, None, None)],
            "coretemp": [_Temp("Package id 0", 52.0, 80.0, 100.0)],
        },
        raising=False,
    )
    monkeypatch.setattr(cpu_mod, "_cpu_brand", lambda: "AMD Ryzen 9 7950X 16-Core Processor")


def test_query_cpu_summary(fake_psutil):
    summary = cpu_mod.query_cpu()
    assert summary == CpuSummary(
        name="AMD Ryzen 9 7950X 16-Core Processor",
        cores=8,
        speed=3.6,
        temperature=52.0,
    )


def test_missing_sensors_reports_zero_temperature(fake_psutil, monkeypatch):
    monkeypatch.setattr(cpu_mod.psutil, "sensors_temperatures", lambda: {}, raising=False)
    assert cpu_mod.query_cpu().temperature == 0


def test_sensor_api_absent(fake_psutil, monkeypatch):
    monkeypatch.delattr(cpu_mod.psutil, "sensors_temperatures", raising=False)
    assert cpu_mod.query_cpu().temperature == 0


def test_physical_core_count_unknown_falls_back_to_logical(fake_psutil, monkeypatch):
    monkeypatch.setattr(cpu_mod.psutil, "cpu_count", lambda logical=True: 16 if logical else None)
    assert cpu_mod.query_cpu().cores == 16


def test_no_frequency_reports_zero_speed(fake_psutil, monkeypatch):
    monkeypatch.setattr(cpu_mod.psutil, "cpu_freq", lambda: None)
    assert cpu_mod.query_cpu().speed == 0


def test_failure_returns_none(fake_psutil, monkeypatch):
    def _boom(*args, **kwargs):
        raise RuntimeError("psutil broke")

    monkeypatch.setattr(cpu_mod.psutil, "cpu_count", _boom)
    assert cpu_mod.query_cpu() is None


def test_zero_current_frequency_uses_max(fake_psutil, monkeypatch):
    monkeypatch.setattr(cpu_mod.psutil, "cpu_freq", lambda: _Freq(0.0, 800.0, 4200.0))
    assert cpu_mod.query_cpu().speed == 4.2


def test_accepts_config(fake_psutil, fake_config):
    config, runner = fake_config()
    assert cpu_mod.query_cpu(config).cores == 8
    assert runner.calls == []


def test_cpu_brand_reads_proc_cpuinfo(tmp_path, monkeypatch):
    cpuinfo = tmp_path / "cpuinfo"
    cpuinfo.write_text("processor\t: 0\nmodel name\t: Intel(R) Xeon(R) Gold 6338 CPU @ 2.00GHz\n")
    monkeypatch.setattr(cpu_mod, "PROC_CPUINFO", str(cpuinfo))
    assert cpu_mod._cpu_brand() == "Intel(R) Xeon(R) Gold 6338 CPU @ 2.00GHz"
