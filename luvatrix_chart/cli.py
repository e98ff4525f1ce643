from __future__ import annotations

import argparse
import logging
from pathlib import Path

from luvatrix_chart.config import build_chart, load_chart_config
from luvatrix_chart.demo import demo_chart
from luvatrix_chart.renderers import RENDERERS

LOGGER = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="luvatrix-chart")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Root logging level. Default: WARNING.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    render = sub.add_parser("render", help="Render a TOML chart definition to PNG.")
    render.add_argument("config", type=Path)
    render.add_argument("-o", "--output", type=Path, required=True)

    demo = sub.add_parser("demo", help="Render a built-in sample chart (desktop browser market share).")
    demo.add_argument("kind", choices=sorted(RENDERERS))
    demo.add_argument("-o", "--output", type=Path, required=True)
    demo.add_argument("--width", type=int, default=600)
    demo.add_argument("--height", type=int, default=500)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    if args.command == "render":
        chart = build_chart(load_chart_config(args.config))
    else:
        chart = demo_chart(args.kind, width=args.width, height=args.height)
    out = chart.save_png(args.output)
    LOGGER.info("wrote %dx%d chart to %s", chart.width, chart.height, out)
    print(f"wrote {out}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
