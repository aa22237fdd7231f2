"""Single-company research: prompt, one completion call, parse."""

import logging
from typing import Optional, Sequence

from company_research import constants
from company_research.ai.prompts import ResearchPrompts, unique_fields
from company_research.ai.response_parser import parse_field_lines
from company_research.exceptions import ProviderError, ValidationError
from company_research.logging_config import format_company_name
from company_research.research.models import ResearchResult

logger = logging.getLogger(__name__)


class CompanyResearcher:
    """Researches one company's fields with a single completion call.

    The returned mapping is exactly what the provider reported: fields the
    provider skipped are absent and "Unknown" values are left for the
    enhancement pass. Provider errors propagate; this layer never retries.
    """

    def __init__(
        self,
        client,
        prompts: Optional[ResearchPrompts] = None,
        temperature: float = constants.INITIAL_TEMPERATURE,
        max_tokens: int = constants.INITIAL_MAX_TOKENS,
    ):
        """
        Initialize the researcher.

        Args:
            client: CompletionClient (or any object with the same async complete())
            prompts: Prompt templates; built with default field guidance if omitted
            temperature: Sampling temperature for the research call
            max_tokens: Output token budget for the research call
        """
        self.client = client
        self.prompts = prompts or ResearchPrompts()
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def research(
        self,
        company: str,
        fields: Sequence[str],
        credential: Optional[str] = None,
    ) -> ResearchResult:
        """
        Research the requested fields for one company.

        Args:
            company: Company name
            fields: Requested field names
            credential: Provider API key; the client default when omitted

        Returns:
            Parsed field → value mapping (possibly empty)

        Raises:
            ValidationError: Empty company name, field list or credential
            ProviderError: Provider call failed (ConnectivityError and
                MalformedResponseError included)
        """
        if not company or not company.strip():
            raise ValidationError("Company name is required")
        if not fields:
            raise ValidationError("At least one field is required")
        if credential is not None and not credential.strip():
            raise ValidationError("Provider credential is required")

        _, display_name = format_company_name(company)
        prompt = self.prompts.build_research_prompt(company, fields)

        try:
            completion = await self.client.complete(
                self.prompts.system_prompt,
                prompt,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                credential=credential,
            )
        except ProviderError as e:
            logger.error("AI research call failed for %s: %s", display_name, e)
            raise

        results = parse_field_lines(completion.text)
        requested = unique_fields(fields)
        logger.info(
            "Research for %s returned %d/%d fields",
            display_name,
            sum(1 for name in requested if name in results),
            len(requested),
        )
        return results
