"""
Command line entry point.

    spendcity build --email you@example.com --seed 7
    spendcity show --recover
"""
import argparse
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional, Sequence

from spendcity.config import Config, MapConfig
from spendcity.errors import SpendCityError
from spendcity.grid import GridState
from spendcity.identity import EnvIdentity, StaticIdentity
from spendcity.logger import setup_logger
from spendcity.services import MapService


def format_grid(state: GridState) -> str:
    return "\n".join(" ".join(row) for row in state.map_data)


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="spendcity", description="Turn spending data into a city map.")
    parser.add_argument("--data-dir", type=Path, help="folder holding UserData/ and the state file")
    parser.add_argument("--state", type=Path, help="state file path (default: <data-dir>/map_state.json)")
    parser.add_argument("--log-level", default=None)
    sub = parser.add_subparsers(dest="command", required=True)

    build = sub.add_parser("build", help="generate a new map from the user's spending file")
    build.add_argument("--email", help="user e-mail (default: SPENDCITY_USER_EMAIL)")
    build.add_argument("--seed", type=int, help="random seed for a reproducible layout")

    show = sub.add_parser("show", help="print the saved map")
    show.add_argument("--recover", action="store_true", help="fall back to a fresh map if the file is corrupt")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parser().parse_args(argv)
    logger = setup_logger(level=args.log_level or Config.LOG_LEVEL)

    try:
        config = MapConfig.from_env()
        if args.data_dir is not None:
            config = replace(config, data_dir=args.data_dir)
        if args.state is not None:
            config = replace(config, state_path=args.state)

        if args.command == "build":
            if args.seed is not None:
                config = replace(config, seed=args.seed)
            identity = StaticIdentity(args.email) if args.email else EnvIdentity()
            state, diagnostics = MapService(config, identity).build()
            print(format_grid(state))
            for row in diagnostics.rows():
                print(
                    f"{row['category']}: {row['total']:.2f} -> "
                    f"{row['placed']}/{row['requested']} placed"
                )
            if diagnostics.failed:
                print(f"{diagnostics.failed} building(s) did not fit")
        else:
            state = MapService(config, EnvIdentity()).load_previous(recover=args.recover)
            print(format_grid(state))
    except (SpendCityError, ValueError) as e:
        logger.error("%s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
