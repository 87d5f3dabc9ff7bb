# opportunity_hunter/engine.py
"""
Run lifecycle for one adapter invocation:

    INIT -> SCANNING -> MATCHING -> PERSISTING -> LOGGED

Every run ends with exactly one HuntLog row: completed, failed (the error is
re-raised) or cancelled (HuntCancelled is raised). Cancellation is honoured up
to the start of PERSISTING; once writes begin the batch runs to completion or
to its first persistence error.
"""
from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, List, Optional, Sequence

from opportunity_hunter.exceptions import HuntCancelled
from opportunity_hunter.models import HuntLog, HuntStatus, Opportunity, Skill, utcnow
from opportunity_hunter.sources.base import SourceAdapter
from opportunity_hunter.store import HuntLogStore, OpportunityStore

logger = logging.getLogger(__name__)


class RunState(str, Enum):
    INIT = "init"
    SCANNING = "scanning"
    MATCHING = "matching"
    PERSISTING = "persisting"
    LOGGED = "logged"


class HuntRun:
    def __init__(
        self,
        adapter: SourceAdapter,
        store: OpportunityStore,
        log_store: HuntLogStore,
        now: Callable[[], datetime] = utcnow,
        timer: Callable[[], float] = time.monotonic,
    ):
        self.adapter = adapter
        self.store = store
        self.log_store = log_store
        self._now = now
        self._timer = timer

        self.state = RunState.INIT
        self.history: List[RunState] = [RunState.INIT]
        self.log: Optional[HuntLog] = None

        self._started_at: Optional[datetime] = None
        self._t0 = 0.0

    def _enter(self, state: RunState) -> None:
        self.state = state
        self.history.append(state)

    @staticmethod
    def _check_cancel(cancel: Optional[threading.Event]) -> None:
        if cancel is not None and cancel.is_set():
            raise HuntCancelled("hunt cancelled")

    def _write_log(self, status: HuntStatus, found: int = 0, error: Optional[BaseException] = None) -> HuntLog:
        elapsed_ms = int((self._timer() - self._t0) * 1000)
        entry = HuntLog(
            hunt_name=self.adapter.name,
            started_at=self._started_at or self._now(),
            completed_at=self._now(),
            opportunities_found=found,
            status=status,
            error_message=(str(error) or type(error).__name__) if error is not None else None,
            execution_time_ms=elapsed_ms,
        )
        if self.state is not RunState.LOGGED:
            self._enter(RunState.LOGGED)
        self.log_store.append(entry)
        self.log = entry
        return entry

    def _fail(self, status: HuntStatus, error: BaseException) -> None:
        try:
            self._write_log(status, error=error)
        except Exception:
            logger.exception("[%s] could not record %s hunt", self.adapter.name, status)

    def execute(self, skills: Sequence[Skill], cancel: Optional[threading.Event] = None) -> List[Opportunity]:
        name = self.adapter.name
        logger.info("Starting %s...", name)

        self._enter(RunState.SCANNING)
        self._started_at = self._now()
        self._t0 = self._timer()

        try:
            self._check_cancel(cancel)
            listings = self.adapter.scan(skills, cancel)
            self._check_cancel(cancel)

            self._enter(RunState.MATCHING)
            matched = self.adapter.match(listings, skills)
            self._check_cancel(cancel)

            self._enter(RunState.PERSISTING)
            for opp in matched:
                self.store.upsert(opp)
        except HuntCancelled as e:
            logger.warning("[%s] hunt cancelled: %s", name, e)
            self._fail("cancelled", e)
            raise
        except Exception as e:
            logger.error("[%s] hunt failed: %s", name, e)
            self._fail("failed", e)
            raise

        try:
            entry = self._write_log("completed", found=len(listings))
        except Exception as e:
            logger.error("[%s] could not record completed hunt: %s", name, e)
            self._fail("failed", e)
            raise

        logger.info(
            "[%s] hunt complete in %dms: found %d, matched %d above threshold",
            name, entry.execution_time_ms, len(listings), len(matched),
        )
        return matched


def run_hunt(
    adapter: SourceAdapter,
    skills: Sequence[Skill],
    store: OpportunityStore,
    log_store: Optional[HuntLogStore] = None,
    cancel: Optional[threading.Event] = None,
) -> List[Opportunity]:
    """Run one adapter end to end. `log_store` defaults to `store`."""
    run = HuntRun(adapter, store, log_store if log_store is not None else store)
    return run.execute(skills, cancel)


@dataclass
class HuntOutcome:
    hunt_name: str
    platform: str
    matched: List[Opportunity] = field(default_factory=list)
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def run_hunts(
    adapters: Sequence[SourceAdapter],
    skills: Sequence[Skill],
    store: OpportunityStore,
    log_store: Optional[HuntLogStore] = None,
    max_workers: int = 1,
    cancel: Optional[threading.Event] = None,
) -> List[HuntOutcome]:
    """
    Run several adapters. Each run is isolated: a failing platform is recorded
    in its outcome and the others still execute. Outcomes follow the order of
    `adapters`.
    """

    def _one(adapter: SourceAdapter) -> HuntOutcome:
        outcome = HuntOutcome(hunt_name=adapter.name, platform=adapter.platform)
        try:
            outcome.matched = run_hunt(adapter, skills, store, log_store, cancel)
        except Exception as e:
            outcome.error = e
        return outcome

    if max_workers <= 1 or len(adapters) <= 1:
        return [_one(a) for a in adapters]

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        return list(pool.map(_one, adapters))
