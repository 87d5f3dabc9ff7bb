import pytest

from opportunity_hunter.config import Config, FreelancerSourceCfg, Sources, UpworkSourceCfg
from opportunity_hunter.exceptions import ConfigError
from opportunity_hunter.signing import HeaderSigner, NullSigner, OAuth1Signer
from opportunity_hunter.sources import ADAPTERS, build_adapter, build_adapters, build_signer
from opportunity_hunter.sources.base import QuerySource
from opportunity_hunter.sources.upwork import UpworkSource


def test_every_platform_has_an_adapter():
    assert set(ADAPTERS) == {"upwork", "freelancer", "indeed", "wellfound", "angellist", "weworkremotely"}
    assert all(cls.platform == name for name, cls in ADAPTERS.items())


def test_build_signer():
    with pytest.raises(ConfigError):
        build_signer("upwork", UpworkSourceCfg())
    with pytest.raises(ConfigError):
        build_signer("freelancer", FreelancerSourceCfg())

    assert isinstance(build_signer("upwork", UpworkSourceCfg(api_key="k", api_secret="s")), OAuth1Signer)
    assert build_signer("freelancer", FreelancerSourceCfg(api_key="k")).sign("GET", "u", {}) == {
        "Freelancer-Developer-Key": "k"
    }
    assert isinstance(build_signer("wellfound", Config().sources.wellfound), HeaderSigner)
    assert isinstance(build_signer("weworkremotely", Config().sources.weworkremotely), NullSigner)


def test_auto_selection_skips_sources_without_credentials(caplog):
    adapters = build_adapters(Config())
    assert [a.platform for a in adapters] == ["indeed", "wellfound", "angellist", "weworkremotely"]
    assert "upwork" in caplog.text


def test_disabled_sources_are_not_auto_selected():
    cfg = Config(sources=Sources(indeed={"enabled": False}, wellfound={"enabled": False}))
    assert "indeed" not in [a.platform for a in build_adapters(cfg)]


def test_explicit_platforms():
    cfg = Config(sources=Sources(upwork={"api_key": "k", "api_secret": "s", "enabled": False}))

    [adapter] = build_adapters(cfg, ["Upwork"])
    assert isinstance(adapter, UpworkSource)

    with pytest.raises(ConfigError):
        build_adapters(Config(), ["freelancer"])
    with pytest.raises(ConfigError):
        build_adapter("monster", Config())


def test_invalid_weight_vector_is_rejected():
    class Greedy(UpworkSource):
        weights = {"skill": 0.9, "pay": 0.5}

    with pytest.raises(ConfigError):
        Greedy(UpworkSourceCfg())

    assert issubclass(Greedy, QuerySource)
