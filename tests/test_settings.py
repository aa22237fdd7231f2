"""Tests for research settings loading."""

import pytest

from company_research import constants
from company_research.exceptions import ConfigurationError
from company_research.settings import (
    build_settings,
    get_research_settings,
)


class TestBuildSettings:
    def test_defaults(self):
        settings = build_settings({}, {})
        assert settings.model == constants.DEFAULT_MODEL
        assert settings.concurrency_limit == constants.DEFAULT_CONCURRENCY_LIMIT

    def test_file_values(self):
        settings = build_settings(
            {
                "provider": {"model": "perplexity/sonar", "timeout": 30},
                "research": {"temperature": 0.1, "max_tokens": 1000},
                "followup": {"temperature": 0.5, "max_tokens": 800},
                "batch": {"concurrency_limit": 5},
                "field_guidance": {"Office Count": "Check the locations page"},
            },
            {},
        )
        assert settings.model == "perplexity/sonar"
        assert settings.timeout == 30.0
        assert settings.research_temperature == 0.1
        assert settings.research_max_tokens == 1000
        assert settings.followup_temperature == 0.5
        assert settings.followup_max_tokens == 800
        assert settings.concurrency_limit == 5
        assert settings.field_guidance["Office Count"] == "Check the locations page"

    def test_environment_overrides_file(self):
        settings = build_settings(
            {"provider": {"model": "perplexity/sonar"}, "batch": {"concurrency_limit": 5}},
            {
                "RESEARCH_MODEL": "perplexity/sonar-reasoning",
                "RESEARCH_CONCURRENCY": "2",
                "RESEARCH_TIMEOUT": "15",
                "OPENROUTER_BASE_URL": "http://localhost:4000/v1",
            },
        )
        assert settings.model == "perplexity/sonar-reasoning"
        assert settings.concurrency_limit == 2
        assert settings.timeout == 15.0
        assert settings.base_url == "http://localhost:4000/v1"

    @pytest.mark.parametrize("limit", ["0", "-3"])
    def test_concurrency_below_one_rejected(self, limit):
        with pytest.raises(ConfigurationError, match="Concurrency limit"):
            build_settings({}, {"RESEARCH_CONCURRENCY": limit})

    def test_non_numeric_value_rejected(self):
        with pytest.raises(ConfigurationError, match="research.temperature"):
            build_settings({"research": {"temperature": "warm"}}, {})

    def test_non_positive_timeout_rejected(self):
        with pytest.raises(ConfigurationError, match="Timeout"):
            build_settings({"provider": {"timeout": 0}}, {})

    def test_section_must_be_mapping(self):
        with pytest.raises(ConfigurationError, match="provider"):
            build_settings({"provider": ["not", "a", "mapping"]}, {})

    def test_settings_are_frozen(self):
        settings = build_settings({}, {})
        with pytest.raises(AttributeError):
            settings.model = "other"


class TestGetResearchSettings:
    def test_loads_explicit_file(self, tmp_path):
        path = tmp_path / "research.yaml"
        path.write_text("batch:\n  concurrency_limit: 7\n")

        assert get_research_settings(str(path)).concurrency_limit == 7

    def test_loads_path_from_environment(self, tmp_path, monkeypatch):
        path = tmp_path / "research.yaml"
        path.write_text("provider:\n  model: perplexity/sonar\n")
        monkeypatch.setenv("RESEARCH_CONFIG_PATH", str(path))

        assert get_research_settings().model == "perplexity/sonar"

    def test_bundled_config_loads(self):
        settings = get_research_settings()
        assert settings.concurrency_limit >= 1
        assert settings.base_url.startswith("https://")

    def test_cached(self, tmp_path):
        path = tmp_path / "research.yaml"
        path.write_text("batch:\n  concurrency_limit: 4\n")

        assert get_research_settings(str(path)) is get_research_settings(str(path))

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            get_research_settings(str(tmp_path / "missing.yaml"))

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "research.yaml"
        path.write_text("batch: [unclosed\n")

        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            get_research_settings(str(path))

    def test_top_level_must_be_mapping(self, tmp_path):
        path = tmp_path / "research.yaml"
        path.write_text("- just\n- a list\n")

        with pytest.raises(ConfigurationError, match="mapping"):
            get_research_settings(str(path))
