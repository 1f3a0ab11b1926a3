#!/usr/bin/env python3
"""
Run the predator-prey-plant ecology headless or in a pygame window.

Examples:
  python -m predpreyplant.ecology.run --steps 6000 --seed 3
  python -m predpreyplant.ecology.run --render --set mutation_rate=0.2
  python -m predpreyplant.ecology.run --config my_settings.json --plot-path /tmp/ecology.png
"""
from __future__ import annotations

import argparse
import logging
from typing import List, Optional

from predpreyplant.ecology.config import build_settings, parse_override
from predpreyplant.ecology.runner import run_simulation


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    ap.add_argument("--steps", type=int, default=3600, help="Frames to run (1/60 s each when headless)")
    ap.add_argument("--seed", type=int, default=1)
    ap.add_argument("--config", default=None, help="JSON file with SimulationSettings fields")
    ap.add_argument(
        "--set",
        dest="overrides",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Override a single setting; may be repeated",
    )
    ap.add_argument("--log-every", type=int, default=60, help="Print totals every N frames (0 = never)")
    ap.add_argument("--render", action="store_true", help="Open a pygame window")
    ap.add_argument("--fps", type=int, default=60)
    ap.add_argument("--plot-path", default=None, help="Save population/genotype charts to this file")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return ap


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    overrides = {}
    for text in args.overrides:
        overrides.update(parse_override(text))
    settings = build_settings(overrides, path=args.config)

    run_simulation(
        steps=args.steps,
        seed=args.seed,
        settings=settings,
        log_every=args.log_every,
        render=args.render,
        fps=args.fps,
        plot_path=args.plot_path,
    )


if __name__ == "__main__":
    main()
