from __future__ import annotations

from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator

from opportunity_hunter.exceptions import ConfigError


class SourceCfg(BaseModel):
    enabled: bool = True
    match_threshold: float = Field(default=0.65, ge=0.0, le=1.0)
    request_delay_ms: int = Field(default=1000, ge=0)
    timeout_s: float = Field(default=30.0, gt=0)


class UpworkSourceCfg(SourceCfg):
    request_delay_ms: int = 500
    api_key: str = ""
    api_secret: str = ""
    access_token: str = ""
    access_secret: str = ""
    search_url: str = "https://www.upwork.com/api/profiles/v2/search/jobs.json"
    page_size: int = 50

    min_hourly_rate: float = 50.0
    target_hourly_rate: float = 100.0
    max_hours_per_week: float = 20.0

    @model_validator(mode="after")
    def _check_rates(self):
        if self.target_hourly_rate <= self.min_hourly_rate:
            raise ValueError("upwork.target_hourly_rate must be greater than min_hourly_rate")
        return self


class FreelancerSourceCfg(SourceCfg):
    request_delay_ms: int = 1000
    api_key: str = ""
    base_url: str = "https://www.freelancer.com/api"
    page_size: int = 50

    min_budget: float = 200.0
    target_budget: float = 1000.0
    max_competition: float = 20.0

    @model_validator(mode="after")
    def _check_budget(self):
        if self.target_budget <= self.min_budget:
            raise ValueError("freelancer.target_budget must be greater than min_budget")
        return self


class IndeedSourceCfg(SourceCfg):
    request_delay_ms: int = 2000
    publisher_key: str = ""
    api_url: str = "http://api.indeed.com/ads/apisearch"
    search_url: str = "https://www.indeed.com/jobs"
    location: str = "remote"
    job_types: str = "fulltime,contract,parttime"
    page_size: int = 25

    min_salary: float = Field(default=60000.0, gt=0)
    remote_only: bool = False


class WellfoundSourceCfg(SourceCfg):
    request_delay_ms: int = 1000
    api_key: str = ""
    base_url: str = "https://api.wellfound.com/v1"


class AngelListSourceCfg(SourceCfg):
    request_delay_ms: int = 1500
    api_key: str = ""
    base_url: str = "https://api.wellfound.com/v1"
    remote_only: bool = True
    min_salary: float = Field(default=80000.0, gt=0)


class WeWorkRemotelySourceCfg(SourceCfg):
    request_delay_ms: int = 2000
    base_url: str = "https://weworkremotely.com"


class Sources(BaseModel):
    upwork: UpworkSourceCfg = Field(default_factory=UpworkSourceCfg)
    freelancer: FreelancerSourceCfg = Field(default_factory=FreelancerSourceCfg)
    indeed: IndeedSourceCfg = Field(default_factory=IndeedSourceCfg)
    wellfound: WellfoundSourceCfg = Field(default_factory=WellfoundSourceCfg)
    angellist: AngelListSourceCfg = Field(default_factory=AngelListSourceCfg)
    weworkremotely: WeWorkRemotelySourceCfg = Field(default_factory=WeWorkRemotelySourceCfg)

    def get(self, platform: str) -> SourceCfg:
        cfg = getattr(self, platform, None)
        if not isinstance(cfg, SourceCfg):
            raise ConfigError(f"Unknown source: {platform}")
        return cfg


class Hunt(BaseModel):
    database_path: str = "data/opportunities.db"
    max_workers: int = Field(default=1, ge=1)
    log_level: str = "INFO"
    log_file: Optional[str] = None


class Config(BaseModel):
    version: int = 1
    skills_path: str = "config/skills.yaml"
    hunt: Hunt = Field(default_factory=Hunt)
    sources: Sources = Field(default_factory=Sources)


# (source, field) -> environment variable
ENV_CREDENTIALS: Dict[Tuple[str, str], str] = {
    ("upwork", "api_key"): "UPWORK_API_KEY",
    ("upwork", "api_secret"): "UPWORK_API_SECRET",
    ("upwork", "access_token"): "UPWORK_ACCESS_TOKEN",
    ("upwork", "access_secret"): "UPWORK_ACCESS_SECRET",
    ("freelancer", "api_key"): "FREELANCER_API_KEY",
    ("indeed", "publisher_key"): "INDEED_PUBLISHER_KEY",
    ("wellfound", "api_key"): "WELLFOUND_API_KEY",
    ("angellist", "api_key"): "ANGELLIST_API_KEY",
}


def load_config(path: str) -> Config:
    p = Path(path)
    if not p.exists():
        raise ConfigError(f"Config file not found: {p}")

    with open(p, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Config must be a YAML mapping: {p}")

    try:
        return Config(**raw)
    except ValidationError as e:
        raise ConfigError(f"Invalid config {p}: {e}") from e


def apply_env_credentials(cfg: Config, environ: Mapping[str, str]) -> Config:
    """
    Fill empty credential fields from `environ`. Values already present in the
    config file win. Returns a new Config; `cfg` is left untouched.
    """
    sources = cfg.sources.model_copy(deep=True)
    for (platform, field_name), var in ENV_CREDENTIALS.items():
        src = sources.get(platform)
        value = (environ.get(var) or "").strip()
        if value and not getattr(src, field_name):
            setattr(src, field_name, value)
    return cfg.model_copy(update={"sources": sources})
