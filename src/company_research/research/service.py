"""Entry points that bind a provider credential to a research run.

Both functions validate their input before a client is created, build one
CompletionClient for the credential, and close it when the run ends.
"""

import logging
from typing import Callable, List, Optional, Sequence

from company_research.ai.completion_client import CompletionClient
from company_research.research.batch import BatchScheduler
from company_research.research.models import (
    BatchResearchRequest,
    CompanyRecord,
    ResearchRequest,
    ResearchResult,
)
from company_research.research.pipeline import ResearchPipeline
from company_research.settings import ResearchSettings, get_research_settings

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str, ResearchSettings], object]


async def research_company(
    company: str,
    fields: Sequence[str],
    credential: str,
    settings: Optional[ResearchSettings] = None,
    client_factory: ClientFactory = CompletionClient.from_settings,
) -> ResearchResult:
    """
    Research one company: initial call, follow-up for unknowns, fill gaps.

    Raises:
        ValidationError: Missing company, fields or credential
        ProviderError: The initial research call failed
    """
    request = ResearchRequest.from_payload(
        {"company": company, "fields": list(fields or []), "apiKey": credential}
    )
    settings = settings or get_research_settings()

    client = client_factory(request.credential, settings)
    try:
        pipeline = ResearchPipeline.from_settings(client, settings)
        return await pipeline.run(request.company, request.field_names, request.credential)
    finally:
        await client.close()


async def research_batch(
    companies: Sequence[str],
    fields: Sequence[str],
    credential: str,
    concurrency_limit: Optional[int] = None,
    settings: Optional[ResearchSettings] = None,
    client_factory: ClientFactory = CompletionClient.from_settings,
    on_record: Optional[Callable[[CompanyRecord], None]] = None,
) -> List[CompanyRecord]:
    """
    Research many companies with at most ``concurrency_limit`` in flight.

    Returns one record per company, in completion order.

    Raises:
        ValidationError: Missing companies, fields or credential, or a
            concurrency limit below 1
    """
    request = BatchResearchRequest.from_payload(
        {"companies": list(companies or []), "fields": list(fields or []), "apiKey": credential}
    )
    settings = settings or get_research_settings()
    limit = settings.concurrency_limit if concurrency_limit is None else concurrency_limit

    client = client_factory(request.credential, settings)
    try:
        scheduler = BatchScheduler(ResearchPipeline.from_settings(client, settings), limit)
        return await scheduler.run(
            request.companies,
            request.field_names,
            request.credential,
            on_record=on_record,
        )
    finally:
        await client.close()
