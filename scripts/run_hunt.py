# scripts/run_hunt.py
import argparse
import sys

from opportunity_hunter.main import run


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--config", default="config/config.yaml")
    parser.add_argument(
        "--platform",
        action="append",
        dest="platforms",
        help="run only this source (repeatable); default is every enabled source",
    )
    parser.add_argument("--dry-run", action="store_true", help="do not write to the database")
    args = parser.parse_args()

    outcomes = run(args.config, args.platforms, dry_run=args.dry_run)
    if outcomes and not any(o.ok for o in outcomes):
        sys.exit(1)


if __name__ == "__main__":
    main()
