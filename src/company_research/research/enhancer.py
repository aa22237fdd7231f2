"""Follow-up pass for fields the first research call reported as Unknown."""

import logging
from typing import List, Optional

from company_research import constants
from company_research.ai.prompts import ResearchPrompts
from company_research.ai.response_parser import parse_field_lines
from company_research.logging_config import format_company_name
from company_research.research.models import ResearchResult

logger = logging.getLogger(__name__)


def find_unknown_fields(results: ResearchResult) -> List[str]:
    """Return field names whose value is exactly the Unknown sentinel."""
    return [name for name, value in results.items() if value == constants.UNKNOWN]


def merge_followup(
    results: ResearchResult,
    followup: ResearchResult,
    unknown_fields: List[str],
) -> ResearchResult:
    """
    Merge follow-up values into a copy of the results.

    A follow-up value is taken only for a field that was in the unknown set,
    is still Unknown, and whose new value is not Unknown. Known fields and
    fields outside the unknown set are never overwritten.
    """
    targets = set(unknown_fields)
    merged = dict(results)
    for name, value in followup.items():
        if name in targets and merged.get(name) == constants.UNKNOWN and value != constants.UNKNOWN:
            merged[name] = value
    return merged


class UnknownFieldEnhancer:
    """Best-effort second completion call restricted to unknown fields."""

    def __init__(
        self,
        client,
        prompts: Optional[ResearchPrompts] = None,
        temperature: float = constants.FOLLOWUP_TEMPERATURE,
        max_tokens: int = constants.FOLLOWUP_MAX_TOKENS,
    ):
        self.client = client
        self.prompts = prompts or ResearchPrompts()
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def enhance(
        self,
        company: str,
        results: ResearchResult,
        credential: Optional[str] = None,
    ) -> ResearchResult:
        """
        Try once more for fields still marked Unknown.

        Returns ``results`` itself, untouched and without a network call, when
        nothing is unknown. A failed follow-up call is logged and the original
        results are returned.
        """
        unknown_fields = find_unknown_fields(results)
        if not unknown_fields:
            return results

        _, display_name = format_company_name(company)
        prompt = self.prompts.build_followup_prompt(company, unknown_fields)

        try:
            completion = await self.client.complete(
                self.prompts.system_prompt,
                prompt,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                title_suffix="Enhanced Search",
                credential=credential,
            )
        except Exception as e:
            logger.warning(
                "Enhanced research failed for %s, keeping initial results: %s",
                display_name,
                e,
            )
            return results

        merged = merge_followup(results, parse_field_lines(completion.text), unknown_fields)
        recovered = len(unknown_fields) - len(find_unknown_fields(merged))
        logger.info(
            "Enhanced research for %s recovered %d/%d unknown fields",
            display_name,
            recovered,
            len(unknown_fields),
        )
        return merged
