"""Handwritten Medical Note Extraction CLI.

Usage:
    python -m handnote_extractor --input <path> [options]
    python -m handnote_extractor --serve [--host HOST] [--port PORT]
"""

from __future__ import annotations
import argparse
import json
import logging
import sys
from pathlib import Path


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="handnote_extractor",
        description="Extract SOAP notes and lab values from photos of handwritten medical documents using two models per stage",
    )
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument(
        "--input",
        metavar="PATH",
        help="Path to a single photographed note (PNG/JPG/WEBP/PDF)",
    )
    group.add_argument(
        "--serve", action="store_true", help="Run the HTTP API (POST /api/multi-agent)"
    )

    parser.add_argument(
        "--output",
        metavar="PATH",
        default=None,
        help="Write JSON output to file (default: stdout)",
    )
    parser.add_argument(
        "--dry-run", action="store_true", help="Use mock models (no API keys required)"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Print the pipeline trace to stderr",
    )
    parser.add_argument(
        "--format",
        choices=["json", "summary"],
        default="json",
        help="Output format: json (machine-readable) or summary (human-readable table)",
    )
    parser.add_argument("--host", default="127.0.0.1", help="Bind address for --serve")
    parser.add_argument("--port", type=int, default=8000, help="Port for --serve")
    return parser


def format_summary(result) -> str:
    """Format PipelineResult as a human-readable stage table."""
    lines = ["Handwritten Note Analysis", "=" * 25]

    if not result.success:
        lines.append(f"FAILED: {result.error}")
        lines.append("")
        lines.extend(f"  {line}" for line in result.pipeline_trace)
        return "\n".join(lines)

    final = result.final_result
    lines.append(f"Scenario: {final.scenario}")
    lines.append("")

    col_widths = [16, 20, 20, 10]
    header = f"| {'Stage':<{col_widths[0]}} | {'Model A':<{col_widths[1]}} | {'Model B':<{col_widths[2]}} | {'Selected':<{col_widths[3]}} |"
    separator = "|" + "|".join("-" * (w + 2) for w in col_widths) + "|"
    lines.append(header)
    lines.append(separator)

    steps = result.steps
    for stage_name, stage in (
        ("ocr", steps.ocr),
        ("classification", steps.classification),
        ("extraction", steps.extraction),
        ("labs", steps.labs),
    ):
        if stage is None:
            lines.append(
                f"| {stage_name:<{col_widths[0]}} | {'-':<{col_widths[1]}} | {'-':<{col_widths[2]}} | {'skipped':<{col_widths[3]}} |"
            )
            continue
        model_a = f"{stage.model_a.name} {stage.model_a.confidence:.2f}"
        model_b = f"{stage.model_b.name} {stage.model_b.confidence:.2f}"
        lines.append(
            f"| {stage_name:<{col_widths[0]}} "
            f"| {model_a:<{col_widths[1]}} "
            f"| {model_b:<{col_widths[2]}} "
            f"| {stage.selected:<{col_widths[3]}} |"
        )

    lines.append("")
    lines.append("Corrected text:")
    lines.extend(f"  {line}" for line in final.corrected_text.splitlines())
    lines.append("")
    lines.append(f"Pipeline: completed in {result.total_processing_time}ms")
    return "\n".join(lines)


def serve(args, config) -> int:
    import uvicorn

    from handnote_extractor.api import create_app

    uvicorn.run(create_app(config), host=args.host, port=args.port)
    return 0


def main() -> int:
    parser = build_parser()
    args = parser.parse_args()

    log_level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(
        level=log_level, format="%(levelname)s: %(message)s", stream=sys.stderr
    )

    from dotenv import load_dotenv

    from handnote_extractor.schemas.config import PipelineConfig

    load_dotenv()
    config = PipelineConfig.from_env(dry_run=args.dry_run)

    if args.serve:
        return serve(args, config)

    from handnote_extractor.engine.errors import ImageInputError
    from handnote_extractor.pipeline.runner import run_pipeline

    input_path = Path(args.input)
    if not input_path.exists():
        print(f"Error: input file not found: {args.input}", file=sys.stderr)
        return 2

    try:
        result = run_pipeline(input_path, config)
    except ImageInputError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    if args.verbose:
        for line in result.pipeline_trace:
            print(f"[trace] {line}", file=sys.stderr)

    if args.format == "summary":
        output_text = format_summary(result)
    else:
        output_text = json.dumps(result.to_response(), indent=2, default=str)

    if args.output:
        Path(args.output).write_text(output_text)
    else:
        print(output_text)

    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
