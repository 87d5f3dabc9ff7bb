# opportunity_hunter/main.py
from __future__ import annotations

import logging
import os
import threading
from pathlib import Path
from typing import Iterable, List, Optional

from dotenv import load_dotenv

from opportunity_hunter.config import apply_env_credentials, load_config
from opportunity_hunter.engine import HuntOutcome, run_hunts
from opportunity_hunter.http_client import HttpClient
from opportunity_hunter.logging_config import setup_logging
from opportunity_hunter.skills import load_skills
from opportunity_hunter.sources import build_adapters
from opportunity_hunter.store import InMemoryStore, SqliteStore

REPO_ROOT = Path(__file__).resolve().parents[1]

logger = logging.getLogger(__name__)


def _resolve(path: str, base: Path) -> Path:
    p = Path(path)
    return p if p.is_absolute() else (base / p).resolve()


def _print_summary(outcomes: List[HuntOutcome]) -> None:
    for o in outcomes:
        if o.ok:
            print(f"{o.hunt_name}: {len(o.matched)} matches")
        else:
            print(f"{o.hunt_name}: FAILED ({o.error})")

    matched = sorted(
        (opp for o in outcomes for opp in o.matched),
        key=lambda opp: opp.match_score,
        reverse=True,
    )
    for opp in matched[:10]:
        print(f"  {opp.match_score * 100:5.1f}%  [{opp.platform}] {opp.title}  {opp.url}")


def run(
    config_path: str = "config/config.yaml",
    platforms: Optional[Iterable[str]] = None,
    dry_run: bool = False,
    cancel: Optional[threading.Event] = None,
) -> List[HuntOutcome]:
    """
    Load config and skills, run the selected hunts and print a summary.
    `dry_run` keeps results in memory instead of the SQLite database.
    """
    load_dotenv()

    config_file = _resolve(config_path, REPO_ROOT)
    cfg = apply_env_credentials(load_config(str(config_file)), os.environ)
    setup_logging(cfg.hunt.log_level, cfg.hunt.log_file)
    logger.debug("Using config file: %s", config_file)

    skills_file = _resolve(cfg.skills_path, REPO_ROOT)
    skills = load_skills(str(skills_file))
    logger.info("Loaded %d skills from %s", len(skills), skills_file)

    if dry_run:
        store = InMemoryStore()
    else:
        store = SqliteStore(str(_resolve(cfg.hunt.database_path, REPO_ROOT)))

    # one session for every adapter, closed once the hunts finish
    http = HttpClient()
    try:
        adapters = build_adapters(cfg, platforms, http=http)
        if not adapters:
            print("No sources to run. Enable a source in config or pass --platform.")
            return []
        outcomes = run_hunts(adapters, skills, store, max_workers=cfg.hunt.max_workers, cancel=cancel)
    finally:
        http.close()

    _print_summary(outcomes)
    return outcomes


if __name__ == "__main__":
    run()
