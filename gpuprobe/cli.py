"""Command-line interface for gpuprobe."""

import argparse
import json
import logging
import sys
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as package_version

from gpuprobe.config import load_probe_config
from gpuprobe.detect import detect
from gpuprobe.errors import ConfigError
from gpuprobe.service import get_gpu_stats

try:
    GPUPROBE_CLI_VERSION = package_version("gpuprobe")
except PackageNotFoundError:
    GPUPROBE_CLI_VERSION = "0.1.0"


def _load_config(args: argparse.Namespace):
    config = load_probe_config(args.config)
    return config.with_overrides(
        timeout_seconds=args.timeout,
        nvidia_smi=args.nvidia_smi,
        amd_smi=args.amd_smi,
    )


def run_query(args: argparse.Namespace) -> int:
    """Execute `gpuprobe query`."""
    envelope = get_gpu_stats(_load_config(args))
    print(json.dumps(envelope.to_dict(), indent=args.indent))
    return 0 if envelope.ok else 1


def run_detect(args: argparse.Namespace) -> int:
    """Execute `gpuprobe detect`."""
    print(detect(_load_config(args)).value)
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build top-level argument parser."""
    parser = argparse.ArgumentParser(
        prog="gpuprobe",
        description="Report normalized GPU (or CPU fallback) telemetry for this host.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"gpuprobe {GPUPROBE_CLI_VERSION}",
        help="Show CLI version and exit",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--config", help="YAML or JSON config file")
    parser.add_argument(
        "--timeout",
        type=float,
        help="Per-invocation timeout for vendor tools in seconds (default: 5)",
    )
    parser.add_argument("--nvidia-smi", help="Path or name of the nvidia-smi executable")
    parser.add_argument("--amd-smi", help="Path or name of the amd-smi executable")
    sub = parser.add_subparsers(dest="command")

    query = sub.add_parser("query", help="Print the telemetry envelope as JSON")
    query.add_argument(
        "--indent",
        type=int,
        default=2,
        help="JSON indentation (default: 2)",
    )
    query.set_defaults(func=run_query)

    detect_cmd = sub.add_parser("detect", help="Print which vendor tooling is present")
    detect_cmd.set_defaults(func=run_detect)

    return parser


def main(argv=None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    if not getattr(args, "func", None):
        args.func = run_query
        args.indent = 2
    try:
        return args.func(args)
    except ConfigError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
