"""trace2-flamegraph — draw a Git trace2 event log as a flame-graph SVG.

Collect a trace first:

    GIT_TRACE2_EVENT="$(pwd)/trace.txt" GIT_TRACE2_EVENT_DEPTH=100 git <command>

then render it:

    python main.py trace.txt -o flamegraph.svg
"""

import logging
import os
import sys
from argparse import ArgumentParser

from trace2_flamegraph.config import load_config, load_yaml_config
from trace2_flamegraph.decoder import read_events
from trace2_flamegraph.errors import TraceError
from trace2_flamegraph.extractor import extract_regions
from trace2_flamegraph.renderer import render_svg

logger = logging.getLogger(__name__)


def build_parser() -> ArgumentParser:
    """Build the CLI argument parser."""
    parser = ArgumentParser(
        prog="trace2-flamegraph",
        description="Render a Git trace2 event log as a flame-graph SVG.",
    )
    parser.add_argument(
        "trace_file",
        nargs="?",
        default="-",
        help="trace2 event file (default: read stdin)",
    )
    parser.add_argument(
        "-o", "--output",
        help="Write the SVG to this file (default: stdout)",
    )
    parser.add_argument(
        "--config",
        help="Path to YAML config file",
    )
    parser.add_argument(
        "--stats",
        action="store_true",
        help="Print an extraction summary instead of the SVG",
    )
    parser.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Summary format for --stats (default: text)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log skipped and excluded events",
    )
    return parser


def read_trace(path: str):
    """Decode the trace at *path*, or stdin for '-'."""
    if path == "-":
        return read_events(sys.stdin)
    with open(path, "r", encoding="utf-8") as f:
        return read_events(f)


def run(args) -> None:
    """Decode, extract, then render or summarize."""
    config = load_config(load_yaml_config(args.config))
    events = read_trace(args.trace_file)
    extraction = extract_regions(events, config)

    if args.stats:
        from trace2_flamegraph.stats import format_summary_json, format_summary_text, summarize
        summary = summarize(extraction, events)
        if args.format == "json":
            print(format_summary_json(summary))
        else:
            print(format_summary_text(summary))
        return

    svg = render_svg(extraction, config)
    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(svg)
        logger.info("Wrote %s", args.output)
    else:
        sys.stdout.write(svg)
        sys.stdout.flush()


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [FLAMEGRAPH] %(levelname)s %(message)s",
        stream=sys.stderr,
    )

    try:
        run(args)
    except BrokenPipeError:
        # Reader went away; point stdout at devnull so the exit-time flush succeeds.
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, sys.stdout.fileno())
        return 0
    except (TraceError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        sys.exit(0)
    except BrokenPipeError:
        sys.exit(0)
