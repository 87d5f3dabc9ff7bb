# opportunity_hunter/sources/__init__.py
"""
Registry / factory for source adapters.

Adapters are looked up by platform name; each gets its own config section and
a request signer built from that section's credentials.
"""
import logging
from typing import Dict, Iterable, List, Optional, Type

from opportunity_hunter.config import Config, SourceCfg
from opportunity_hunter.exceptions import ConfigError
from opportunity_hunter.http_client import HttpClient
from opportunity_hunter.rate_limit import Clock
from opportunity_hunter.signing import HeaderSigner, NullSigner, OAuth1Signer, RequestSigner
from opportunity_hunter.sources.angellist import AngelListSource
from opportunity_hunter.sources.base import QuerySource, SourceAdapter
from opportunity_hunter.sources.freelancer import FreelancerSource
from opportunity_hunter.sources.indeed import IndeedSource
from opportunity_hunter.sources.upwork import UpworkSource
from opportunity_hunter.sources.weworkremotely import WeWorkRemotelySource
from opportunity_hunter.sources.wellfound import WellfoundSource

logger = logging.getLogger(__name__)

ADAPTERS: Dict[str, Type[QuerySource]] = {
    "upwork": UpworkSource,
    "freelancer": FreelancerSource,
    "indeed": IndeedSource,
    "wellfound": WellfoundSource,
    "angellist": AngelListSource,
    "weworkremotely": WeWorkRemotelySource,
}


def build_signer(platform: str, cfg: SourceCfg) -> RequestSigner:
    if platform == "upwork":
        if not cfg.api_key or not cfg.api_secret:
            raise ConfigError("Upwork API credentials missing (api_key / api_secret)")
        return OAuth1Signer(cfg.api_key, cfg.api_secret, cfg.access_token, cfg.access_secret)
    if platform == "freelancer":
        if not cfg.api_key:
            raise ConfigError("Freelancer API key missing")
        return HeaderSigner({"Freelancer-Developer-Key": cfg.api_key})
    if platform in ("wellfound", "angellist"):
        return HeaderSigner.bearer(cfg.api_key)
    return NullSigner()


def build_adapter(
    platform: str,
    config: Config,
    http: Optional[HttpClient] = None,
    clock: Optional[Clock] = None,
    signer: Optional[RequestSigner] = None,
) -> SourceAdapter:
    name = (platform or "").strip().lower()
    adapter_cls = ADAPTERS.get(name)
    if adapter_cls is None:
        raise ConfigError(f"Unknown source: {platform}")

    source_cfg = config.sources.get(name)
    return adapter_cls(
        source_cfg,
        http=http,
        signer=signer or build_signer(name, source_cfg),
        clock=clock,
    )


def build_adapters(
    config: Config,
    platforms: Optional[Iterable[str]] = None,
    http: Optional[HttpClient] = None,
    clock: Optional[Clock] = None,
) -> List[SourceAdapter]:
    """
    Adapters for `platforms`, or for every enabled source when None.
    Explicitly requested platforms are built even if disabled in config.
    """
    if platforms is not None:
        names = [p.strip().lower() for p in platforms if p and p.strip()]
        return [build_adapter(n, config, http=http, clock=clock) for n in names]

    adapters: List[SourceAdapter] = []
    for name in ADAPTERS:
        if not config.sources.get(name).enabled:
            continue
        try:
            adapters.append(build_adapter(name, config, http=http, clock=clock))
        except ConfigError as e:
            logger.warning("Skipping %s: %s", name, e)
    return adapters


__all__ = [
    "ADAPTERS",
    "AngelListSource",
    "FreelancerSource",
    "IndeedSource",
    "QuerySource",
    "SourceAdapter",
    "UpworkSource",
    "WeWorkRemotelySource",
    "WellfoundSource",
    "build_adapter",
    "build_adapters",
    "build_signer",
]
