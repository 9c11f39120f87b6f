# ==============================================
# CLI: Command Line Entry Point
# ==============================================
#
# PURPOSE:
#   Run the MetadataService operations from a shell.
#
# COMMANDS:
# ---------
# 1. Embed an analysis JSON into a stored image:
#    orbit-metadata embed photos/patio.png analysis.json photos/patio.jpg
#    orbit-metadata embed photos/patio.jpg analysis.json out/patio.jpg --schema lifestyle
#
# 2. Read the packet back:
#    orbit-metadata read out/patio_me.jpg
#
# 3. Build a standalone packet (optionally stored as XML):
#    orbit-metadata xmp analysis.json --output packets/patio.xmp
#
# 4. Write a report next to the image:
#    orbit-metadata report out/patio_me.jpg --format simple
#
# Storage backend and credentials come from .env (see config.py).
# Exit status is 0 on success, 1 on failure.
#
# ==============================================

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from orbit_metadata.config import get_config
from orbit_metadata.errors import StorageError
from orbit_metadata.logging_setup import setup_logging
from orbit_metadata.metadata_service import MetadataService
from orbit_metadata.reporting.report_builder import ReportFormat


def _load_metadata(path: str) -> dict:
    try:
        with open(Path(path), "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise SystemExit(f"✗ Cannot read metadata file {path}: {e}")
    except json.JSONDecodeError as e:
        raise SystemExit(f"✗ Metadata file {path} is not valid JSON: {e}")
    if not isinstance(data, dict):
        raise SystemExit(f"✗ Metadata file {path} must contain a JSON object")
    return data


def _report(result: dict, ok_message: str, as_json: bool) -> int:
    if as_json:
        print(json.dumps(result, indent=2, ensure_ascii=False, default=str))
    elif result.get("success"):
        print(f"✓ {ok_message}")
    else:
        print(f"✗ {result.get('error')}")
    return 0 if result.get("success") else 1


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="orbit-metadata", description="Embed and read ORBIT XMP metadata")
    ap.add_argument("--log-level", default=None, help="Logging level (default: LOG_LEVEL or INFO)")
    ap.add_argument("--json", action="store_true", help="Print the full result as JSON")
    sub = ap.add_subparsers(dest="command", required=True)

    embed = sub.add_parser("embed", help="Embed metadata into a stored image")
    embed.add_argument("source_path", help="Storage path of the source image")
    embed.add_argument("metadata_file", help="Local JSON file holding the analysis tree")
    embed.add_argument("output_path", help="Storage path for the processed image (_me suffix is added)")
    embed.add_argument("--schema", choices=["lifestyle", "product", "orbit"], default=None,
                       help="Schema variant (detected from the tree if omitted)")
    embed.add_argument("--quality", type=int, default=None, help="JPEG quality when converting")

    read = sub.add_parser("read", help="Read the packet from a stored image")
    read.add_argument("image_path", help="Storage path of the image")

    xmp = sub.add_parser("xmp", help="Create a standalone packet")
    xmp.add_argument("metadata_file", help="Local JSON file holding the analysis tree")
    xmp.add_argument("--schema", choices=["lifestyle", "product", "orbit"], default=None)
    xmp.add_argument("--output", default=None, help="Storage path to save the packet as XML")
    xmp.add_argument("--no-wrappers", action="store_true", help="Omit the xpacket / xmpmeta envelope")
    xmp.add_argument("--compact", action="store_true", help="Do not pretty-print the envelope")

    report = sub.add_parser("report", help="Create a metadata report for a stored image")
    report.add_argument("image_path", help="Storage path of the image")
    report.add_argument("--format", choices=[fmt.value for fmt in ReportFormat], default="detailed")
    report.add_argument("--output", default=None, help="Storage path for the report")
    report.add_argument("--no-raw-json", action="store_true", help="Skip the raw JSON section")

    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = get_config()
    setup_logging(args.log_level or config.log_level)

    try:
        service = MetadataService(config)
    except (StorageError, ValueError) as e:
        return _report({"success": False, "error": f"Storage setup failed: {e}"}, "", args.json)

    with service:
        if args.command == "embed":
            result = service.embed_metadata(
                args.source_path,
                _load_metadata(args.metadata_file),
                args.output_path,
                schema_type=args.schema,
                compression_quality=args.quality
            )
            message = (f"Embedded {result.get('field_count')} fields "
                       f"({result.get('schema_type')}) → {result.get('output_path')}")
            return _report(result, message, args.json)

        if args.command == "read":
            result = service.read_metadata(args.image_path)
            if result.get("success") and not args.json:
                if not result["xmp_found"]:
                    print(f"⚠ No XMP packet in {args.image_path}")
                    return 0
                print(json.dumps(result["metadata"], indent=2, ensure_ascii=False))
            return _report(result, f"Read {result.get('schema_type')} metadata from {args.image_path}", args.json)

        if args.command == "xmp":
            result = service.create_packet(
                _load_metadata(args.metadata_file),
                schema_type=args.schema,
                output_path=args.output,
                include_wrappers=not args.no_wrappers,
                pretty_print=not args.compact
            )
            if result.get("success") and not args.json and not args.output:
                print(result["xmp_packet"])
            stats = result.get("xmp_stats") or {}
            message = f"Packet created ({stats.get('packet_size')} bytes, {stats.get('field_count')} fields)"
            if result.get("saved_to"):
                message += f" → {result['saved_to']}"
            return _report(result, message, args.json)

        result = service.create_report(
            args.image_path,
            report_format=args.format,
            output_path=args.output,
            include_raw_json=not args.no_raw_json
        )
        return _report(result, f"Report written to {result.get('report_path')}", args.json)


if __name__ == "__main__":
    sys.exit(main())
