from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import GenerationSettings
from .errors import CatalogEmptyError, ConfigError, GenerationExhaustedError, GenerationStalledError, TemplateError
from .generation import LevelFactory
from .logging_config import configure_logging

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="levelgen", description="Generate a room-based level and print a JSON summary.")
    parser.add_argument("--config", type=Path, help="JSON settings file (environment LEVELGEN_* is used otherwise)")
    parser.add_argument("--seed", help="Integer or string seed")
    parser.add_argument("--accelerate-until", type=int, help="Room count at which growth switches to filling")
    parser.add_argument("--teams", type=int, help="Team slots including neutral")
    parser.add_argument("--max-resets", type=int, help="Give up after this many rejected attempts")
    parser.add_argument("--max-steps", type=int, help="Give up after this many generation steps")
    parser.add_argument("--reset-delay", type=float, help="Seconds to wait between attempts")
    parser.add_argument("--templates", action="append", default=[], metavar="DIR", help="Extra template pack directory")
    parser.add_argument("--no-builtin", action="store_true", help="Do not load the bundled template pack")
    parser.add_argument("--user-templates", action="store_true", help="Also load packs from the per-user data directory")
    parser.add_argument("--debug", action="store_true", help="Verbose logging")
    return parser.parse_args(argv)


def build_settings(args: argparse.Namespace) -> GenerationSettings:
    settings = GenerationSettings.from_json(args.config) if args.config else GenerationSettings.from_env()
    overrides = {
        "accelerate_until": args.accelerate_until,
        "number_of_teams": args.teams,
        "max_resets": args.max_resets,
        "reset_delay": args.reset_delay,
    }
    for name, value in overrides.items():
        if value is not None:
            setattr(settings, name, value)
    if args.seed is not None:
        settings.seed = int(args.seed) if args.seed.lstrip("-").isdigit() else args.seed
    settings.template_dirs = list(settings.template_dirs) + [str(p) for p in args.templates]
    if args.no_builtin:
        settings.use_builtin_templates = False
    if args.user_templates:
        settings.use_user_templates = True
    return settings.validate()


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(logging.DEBUG if args.debug else logging.WARNING)

    try:
        settings = build_settings(args)
        result = LevelFactory.generate(settings, max_steps=args.max_steps)
    except (ConfigError, TemplateError, CatalogEmptyError, FileNotFoundError) as e:
        logger.error("Configuration error: %s", e)
        print(f"error: {e}", file=sys.stderr)
        return 2
    except (GenerationStalledError, GenerationExhaustedError) as e:
        logger.error("Generation failed: %s", e)
        print(f"error: {e}", file=sys.stderr)
        return 1

    # Print JSON summary so it can be diffed across runs
    print(json.dumps(result.to_dict(), indent=2, sort_keys=True))
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
