# opportunity_hunter/sources/base.py
from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Generic, List, Optional, Protocol, Sequence, TypeVar

from pydantic import ValidationError

from opportunity_hunter.config import SourceCfg
from opportunity_hunter.exceptions import ConfigError, HuntCancelled, QueryBuildError, SourceUnavailable
from opportunity_hunter.http_client import HttpClient
from opportunity_hunter.matching import match_listings
from opportunity_hunter.models import Listing, Opportunity, Skill
from opportunity_hunter.rate_limit import Clock, RateLimiter
from opportunity_hunter.scoring import ScoreBreakdown, check_weights
from opportunity_hunter.signing import NullSigner, RequestSigner
from opportunity_hunter.utils import dedupe_by_external_id

logger = logging.getLogger(__name__)

Q = TypeVar("Q")
CfgT = TypeVar("CfgT", bound=SourceCfg)

_PARSE_FAILURES = (KeyError, TypeError, ValueError, AttributeError, OverflowError, OSError, ValidationError)


class SourceAdapter(Protocol):
    """What the orchestrator needs from a source."""

    name: str
    platform: str

    def scan(self, skills: Sequence[Skill], cancel: Optional[threading.Event] = None) -> List[Listing]:
        ...

    def score(self, listing: Listing, skills: Sequence[Skill]) -> float:
        ...

    def match(self, listings: Sequence[Listing], skills: Sequence[Skill]) -> List[Opportunity]:
        ...


class QuerySource(ABC, Generic[CfgT, Q]):
    """
    Shared scan loop for sources that search with a list of queries.

    Concrete sources provide:
      - build_queries(skills): queries to issue, QueryBuildError when none fit
      - fetch(query): one request, normalized into Listings
      - score_breakdown(listing, skills): weighted sub-scores
      - weights: the weight vector, non-negative and summing to <= 1

    Queries run one at a time behind a rate limiter whose interval is the
    source's request_delay_ms. A query whose source is unavailable is skipped.
    """

    name: str = "base-hunt"
    platform: str = "unknown"
    weights: Dict[str, float] = {}

    def __init__(
        self,
        config: CfgT,
        http: Optional[HttpClient] = None,
        signer: Optional[RequestSigner] = None,
        clock: Optional[Clock] = None,
    ):
        try:
            check_weights(self.weights)
        except ValueError as e:
            raise ConfigError(f"{self.name}: {e}") from e

        self.config = config
        self.http = http or HttpClient()
        self.signer = signer or NullSigner()
        self.limiter = RateLimiter(config.request_delay_ms / 1000.0, clock=clock)

    @abstractmethod
    def build_queries(self, skills: Sequence[Skill]) -> List[Q]:
        raise NotImplementedError

    @abstractmethod
    def fetch(self, query: Q) -> List[Listing]:
        raise NotImplementedError

    @abstractmethod
    def score_breakdown(self, listing: Listing, skills: Sequence[Skill]) -> ScoreBreakdown:
        raise NotImplementedError

    def score(self, listing: Listing, skills: Sequence[Skill]) -> float:
        return self.score_breakdown(listing, skills).total

    def scan(self, skills: Sequence[Skill], cancel: Optional[threading.Event] = None) -> List[Listing]:
        try:
            queries = self.build_queries(skills)
        except QueryBuildError as e:
            logger.info("[%s] nothing to search for: %s", self.name, e)
            return []

        logger.info("[%s] scanning with %d queries", self.name, len(queries))
        found: List[Listing] = []
        for query in queries:
            self.limiter.acquire(cancel)
            try:
                batch = self.fetch(query)
            except SourceUnavailable as e:
                logger.warning("[%s] search failed for %r: %s", self.name, query, e)
                continue
            except HuntCancelled:
                raise
            except Exception:
                logger.exception("[%s] unexpected error for %r, skipping query", self.name, query)
                continue
            found.extend(batch)

        unique = dedupe_by_external_id(found)
        logger.info("[%s] found %d unique listings (%d raw)", self.name, len(unique), len(found))
        return unique

    def match(self, listings: Sequence[Listing], skills: Sequence[Skill]) -> List[Opportunity]:
        return match_listings(listings, skills, self.score, self.config.match_threshold)

    def parse_items(self, items: Sequence[Any], parser: Callable[[Any], Listing]) -> List[Listing]:
        """Normalize raw payload items, skipping (and logging) malformed ones."""
        if not items:
            return []
        if not isinstance(items, (list, tuple)):
            logger.warning("[%s] expected a list of items, got %s", self.name, type(items).__name__)
            return []
        out: List[Listing] = []
        for item in items:
            try:
                out.append(parser(item))
            except _PARSE_FAILURES as e:
                logger.warning("[%s] skipped malformed item: %s", self.name, e)
        return out

    def _context(self, listing: Listing) -> str:
        return f"{self.platform}:{listing.external_id}"
