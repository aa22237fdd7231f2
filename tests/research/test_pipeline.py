"""Tests for the per-company research pipeline."""

import asyncio

import pytest

from company_research.ai.prompts import ResearchPrompts
from company_research.exceptions import ProviderError
from company_research.research.pipeline import ResearchPipeline, fill_missing_fields
from company_research.settings import ResearchSettings


def _scripted(initial, followup):
    """Reply with ``initial`` to the research call and ``followup`` to the follow-up."""

    def reply(user_prompt, title_suffix):
        return followup if title_suffix else initial

    return reply


class TestFillMissingFields:
    def test_requested_fields_first_then_extras(self):
        filled = fill_missing_fields(
            {"Mascot": "Roadrunner", "Website": "https://acme.com"},
            ["Website", "ERP System"],
        )
        assert list(filled.items()) == [
            ("Website", "https://acme.com"),
            ("ERP System", "Unknown"),
            ("Mascot", "Roadrunner"),
        ]

    def test_duplicate_requested_fields_collapse(self):
        filled = fill_missing_fields({}, ["Website", "Website"])
        assert filled == {"Website": "Unknown"}


class TestResearchPipeline:
    def test_acme_end_to_end(self, make_client):
        """Research finds one Unknown, the follow-up recovers it."""
        client = make_client(
            _scripted(
                "Website, https://acme.com\nERP System, Unknown",
                "ERP System, SAP (Source: jobs page)",
            )
        )
        pipeline = ResearchPipeline.from_settings(client, ResearchSettings())

        results = asyncio.run(pipeline.run("Acme Co", ["Website", "ERP System"]))

        assert results == {"Website": "https://acme.com", "ERP System": "SAP (Source: jobs page)"}
        assert len(client.calls) == 2
        assert client.calls[1]["title_suffix"] == "Enhanced Search"

    def test_no_followup_when_nothing_unknown(self, make_client):
        client = make_client("Website, https://acme.com\nERP System, SAP")
        pipeline = ResearchPipeline.from_settings(client, ResearchSettings())

        results = asyncio.run(pipeline.run("Acme Co", ["Website", "ERP System"]))

        assert results == {"Website": "https://acme.com", "ERP System": "SAP"}
        assert len(client.calls) == 1

    def test_missing_fields_filled_after_enhancement(self, make_client):
        """Fields the provider never mentioned become Unknown without a follow-up call."""
        client = make_client("Website, https://acme.com")
        pipeline = ResearchPipeline.from_settings(client, ResearchSettings())

        results = asyncio.run(pipeline.run("Acme Co", ["Website", "ERP System"]))

        assert results == {"Website": "https://acme.com", "ERP System": "Unknown"}
        assert len(client.calls) == 1

    def test_fill_can_be_disabled(self, make_client):
        client = make_client("Website, https://acme.com")
        pipeline = ResearchPipeline.from_settings(client, ResearchSettings())
        pipeline.fill_missing = False

        results = asyncio.run(pipeline.run("Acme Co", ["Website", "ERP System"]))

        assert results == {"Website": "https://acme.com"}

    def test_followup_failure_keeps_initial_results(self, make_client):
        client = make_client(
            _scripted("Website, https://acme.com\nERP System, Unknown", ProviderError("boom"))
        )
        pipeline = ResearchPipeline.from_settings(client, ResearchSettings())

        results = asyncio.run(pipeline.run("Acme Co", ["Website", "ERP System"]))

        assert results == {"Website": "https://acme.com", "ERP System": "Unknown"}

    def test_initial_failure_propagates(self, make_client):
        client = make_client(ProviderError("Provider API error (HTTP 402)", status_code=402))
        pipeline = ResearchPipeline.from_settings(client, ResearchSettings())

        with pytest.raises(ProviderError):
            asyncio.run(pipeline.run("Acme Co", ["Website"]))
        assert len(client.calls) == 1

    def test_settings_drive_call_parameters(self, make_client):
        client = make_client(_scripted("ERP System, Unknown", "ERP System, SAP"))
        settings = ResearchSettings(
            research_temperature=0.1,
            research_max_tokens=111,
            followup_temperature=0.4,
            followup_max_tokens=222,
            field_guidance={"ERP System": "Read the 10-K"},
        )
        pipeline = ResearchPipeline.from_settings(client, settings)

        asyncio.run(pipeline.run("Acme Co", ["ERP System"]))

        research_call, followup_call = client.calls
        assert (research_call["temperature"], research_call["max_tokens"]) == (0.1, 111)
        assert (followup_call["temperature"], followup_call["max_tokens"]) == (0.4, 222)
        assert "- ERP System: Read the 10-K" in research_call["user_prompt"]

    def test_injected_prompts_used(self, make_client):
        client = make_client("Website, https://acme.com")
        prompts = ResearchPrompts(system_prompt="Custom system prompt")
        pipeline = ResearchPipeline.from_settings(client, ResearchSettings(), prompts=prompts)

        asyncio.run(pipeline.run("Acme Co", ["Website"]))

        assert client.calls[0]["system_prompt"] == "Custom system prompt"
