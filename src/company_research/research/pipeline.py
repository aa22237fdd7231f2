"""Per-company research pipeline: research, conditional enhancement, fill.

Shared by the single-company API and the batch scheduler so both apply the
same missing-field policy.
"""

import logging
from typing import Optional, Sequence

from company_research import constants
from company_research.ai.prompts import FieldGuidance, ResearchPrompts, unique_fields
from company_research.logging_config import get_structured_logger
from company_research.research.enhancer import UnknownFieldEnhancer, find_unknown_fields
from company_research.research.models import ResearchResult
from company_research.research.researcher import CompanyResearcher
from company_research.settings import ResearchSettings

logger = logging.getLogger(__name__)
slogger = get_structured_logger(__name__)


def fill_missing_fields(results: ResearchResult, fields: Sequence[str]) -> ResearchResult:
    """
    Ensure every requested field has a value.

    Requested fields come first, in request order, with Unknown for any the
    provider never mentioned; extra fields the provider returned follow.
    """
    requested = unique_fields(fields)
    filled = {name: results.get(name, constants.UNKNOWN) for name in requested}
    for name, value in results.items():
        if name not in filled:
            filled[name] = value
    return filled


class ResearchPipeline:
    """Runs research → enhance (only if something is Unknown) → fill."""

    def __init__(
        self,
        researcher: CompanyResearcher,
        enhancer: UnknownFieldEnhancer,
        fill_missing: bool = True,
    ):
        self.researcher = researcher
        self.enhancer = enhancer
        self.fill_missing = fill_missing

    @classmethod
    def from_settings(
        cls,
        client,
        settings: ResearchSettings,
        prompts: Optional[ResearchPrompts] = None,
    ) -> "ResearchPipeline":
        """Wire a pipeline to one completion client using configured parameters."""
        prompts = prompts or ResearchPrompts(FieldGuidance(settings.field_guidance))
        return cls(
            researcher=CompanyResearcher(
                client,
                prompts,
                temperature=settings.research_temperature,
                max_tokens=settings.research_max_tokens,
            ),
            enhancer=UnknownFieldEnhancer(
                client,
                prompts,
                temperature=settings.followup_temperature,
                max_tokens=settings.followup_max_tokens,
            ),
        )

    async def run(
        self,
        company: str,
        fields: Sequence[str],
        credential: Optional[str] = None,
    ) -> ResearchResult:
        """
        Research one company end to end.

        Raises:
            ValidationError: Empty company name or field list
            ProviderError: The initial research call failed
        """
        slogger.research_activity(company, "research", "started", {"fields": len(fields)})
        try:
            results = await self.researcher.research(company, fields, credential)
        except Exception as e:
            slogger.research_activity(company, "research", "failed", {"error": str(e)})
            raise

        unknown_count = len(find_unknown_fields(results))
        if unknown_count:
            logger.info("Found %d unknown fields, attempting enhancement", unknown_count)
            results = await self.enhancer.enhance(company, results, credential)
            slogger.research_activity(
                company,
                "enhance",
                "completed",
                {
                    "unknown_before": unknown_count,
                    "unknown_after": len(find_unknown_fields(results)),
                },
            )
        else:
            slogger.research_activity(company, "enhance", "skipped")

        if self.fill_missing:
            results = fill_missing_fields(results, fields)

        slogger.research_activity(
            company,
            "research",
            "completed",
            {"unknown_fields": len(find_unknown_fields(results))},
        )
        return results
