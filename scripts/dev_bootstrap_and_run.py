#!/usr/bin/env python3
"""Prep and launch a local realm with one command.

Loads `.env` like `manage.py`, optionally wipes the SQLite database, runs
migrations, onboards a handful of demo civilizations, resolves a few ticks and
finally hands over to the in-process scheduler.

Examples
--------
python scripts/dev_bootstrap_and_run.py
python scripts/dev_bootstrap_and_run.py --keep-db --ticks 0
python scripts/dev_bootstrap_and_run.py --players 4 --no-scheduler
"""
from __future__ import annotations

import argparse
import os
import subprocess
import sys
from pathlib import Path
from typing import Iterable, List

from dotenv import load_dotenv

ROOT = Path(__file__).resolve().parents[1]
MANAGE_DIR = ROOT / "realm_simulator"
PYTHON = sys.executable
DB_PATH = Path(os.getenv("REALM_DB_PATH", str(MANAGE_DIR / "db.sqlite3")))

DEMO_CIVS = (
    ("Sargon", "Akkad", "Mari"),
    ("Gilgamesh", "Uruk", "Enkidu"),
    ("Hammurabi", "Babylon", "Sin-muballit"),
    ("Lugalzagesi", "Umma", "Ur-Nanshe"),
    ("Eannatum", "Lagash", "Akurgal"),
    ("Ur-Nammu", "Ur", "Shulgi"),
)


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


DEFAULT_PLAYERS = _int_env("REALM_DEMO_PLAYERS", 3)
DEFAULT_TICKS = _int_env("REALM_DEMO_TICKS", 2)
DEFAULT_RESET = os.getenv("REALM_RESET", "1").lower() not in {"0", "false", "no"}


def load_env_file() -> None:
    """Load environment variables from `.env` if it exists."""
    env_path = ROOT / ".env"
    if env_path.exists():
        load_dotenv(env_path)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Reset, migrate, onboard demo players, resolve ticks and start the scheduler."
    )
    parser.add_argument(
        "--keep-db",
        action="store_true",
        help="Reuse the existing database instead of wiping it (env REALM_RESET=0).",
    )
    parser.add_argument(
        "--force-reset",
        action="store_true",
        help="Force a reset even if --keep-db was supplied earlier.",
    )
    parser.add_argument(
        "--players",
        type=int,
        default=DEFAULT_PLAYERS,
        help=f"Demo civilizations to onboard (default: {DEFAULT_PLAYERS}, max {len(DEMO_CIVS)}).",
    )
    parser.add_argument(
        "--ticks",
        type=int,
        default=DEFAULT_TICKS,
        help=f"Ticks to resolve before the scheduler starts (default: {DEFAULT_TICKS}).",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for spawn points; each demo player uses seed + index.",
    )
    parser.add_argument(
        "--no-scheduler",
        action="store_true",
        help="Perform setup tasks but do not start the tick scheduler.",
    )
    return parser.parse_args()


def build_commands(args: argparse.Namespace) -> List[List[str]]:
    commands: List[List[str]] = [[PYTHON, "manage.py", "migrate"]]

    for index, (leader, civ, advisor) in enumerate(DEMO_CIVS[: max(0, args.players)]):
        onboard = [
            PYTHON,
            "manage.py",
            "onboard_player",
            f"demo-{index + 1}",
            "--leader",
            leader,
            "--civ",
            civ,
            "--advisor",
            advisor,
        ]
        if args.seed is not None:
            onboard.extend(["--seed", str(args.seed + index)])
        commands.append(onboard)

    for _ in range(max(0, args.ticks)):
        commands.append([PYTHON, "manage.py", "run_tick", "--origin", "bootstrap"])

    if not args.no_scheduler:
        commands.append([PYTHON, "manage.py", "run_scheduler"])
    else:
        print(">>> Skipping scheduler start (--no-scheduler).", flush=True)
    return commands


def run_command(cmd: Iterable[str]) -> None:
    command_list = list(cmd)
    display = " ".join(command_list)
    print(f"\n=== Running: {display}\n", flush=True)
    subprocess.run(command_list, cwd=MANAGE_DIR, check=True)


def reset_datastore() -> None:
    if DB_PATH.exists():
        print(f"\n=== Removing {DB_PATH} for a clean reset\n", flush=True)
        DB_PATH.unlink(missing_ok=True)
        DB_PATH.with_name(DB_PATH.name + "-journal").unlink(missing_ok=True)
    else:
        print(">>> No SQLite file found; using Django flush.", flush=True)
        run_command([PYTHON, "manage.py", "migrate"])
        run_command([PYTHON, "manage.py", "flush", "--no-input"])


def main() -> None:
    load_env_file()

    if not MANAGE_DIR.exists():
        raise SystemExit(f"Expected manage.py directory at {MANAGE_DIR}")

    args = parse_args()
    commands = build_commands(args)

    if args.force_reset:
        reset_db = True
    elif args.keep_db:
        reset_db = False
    else:
        reset_db = DEFAULT_RESET

    if reset_db:
        reset_datastore()
    else:
        print(">>> Keeping existing database (--keep-db).", flush=True)

    for cmd in commands:
        try:
            run_command(cmd)
        except subprocess.CalledProcessError as exc:
            print(
                f"Command failed (exit {exc.returncode}): {' '.join(cmd)}",
                file=sys.stderr,
                flush=True,
            )
            raise SystemExit(exc.returncode) from exc


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("\nAborted by user.\n", flush=True)
