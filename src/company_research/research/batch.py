"""Bounded-concurrency batch scheduler for company research.

Each company runs through the ResearchPipeline as its own asyncio task. A
semaphore with ``concurrency_limit`` permits gates admission, so at most
that many pipelines (and therefore outstanding provider calls) are in
flight regardless of batch size. Permits are held for the whole pipeline
and released on every exit path.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from company_research import constants
from company_research.exceptions import ValidationError
from company_research.logging_config import format_company_name, get_structured_logger
from company_research.research.models import CompanyRecord
from company_research.research.pipeline import ResearchPipeline

logger = logging.getLogger(__name__)
slogger = get_structured_logger(__name__)


@dataclass
class BatchJob:
    """Counters for one batch run. Only mutated from the event loop thread."""

    total: int
    concurrency_limit: int
    admitted: int = 0
    active: int = 0
    completed: int = 0
    failed: int = 0
    peak_active: int = 0

    def admit(self) -> None:
        self.admitted += 1
        self.active += 1
        self.peak_active = max(self.peak_active, self.active)

    def release(self) -> None:
        self.active -= 1

    def record(self, record: CompanyRecord) -> None:
        self.completed += 1
        if not record.succeeded:
            self.failed += 1

    @property
    def done(self) -> bool:
        return self.completed == self.total

    @property
    def state(self) -> str:
        """admitting until every company holds or held a permit, then draining, then done."""
        if self.done:
            return "done"
        if self.admitted < self.total:
            return "admitting"
        return "draining"


def _validate_limit(limit: int) -> int:
    if not isinstance(limit, int) or isinstance(limit, bool) or limit < 1:
        raise ValidationError(f"Concurrency limit must be an integer >= 1, got {limit!r}")
    return limit


class BatchScheduler:
    """Drives one research pipeline per company with bounded concurrency.

    Guarantees exactly one CompanyRecord per input company. A company whose
    pipeline raises is recorded with an error and never affects the others.
    Records are returned in completion order; each carries its input index
    (see models.sort_records).

    last_job and peak_in_flight describe the most recent run, so one
    scheduler serves runs one after another. Use a scheduler per batch when
    batches run concurrently.
    """

    def __init__(
        self,
        pipeline: ResearchPipeline,
        concurrency_limit: int = constants.DEFAULT_CONCURRENCY_LIMIT,
    ):
        self.pipeline = pipeline
        self.concurrency_limit = _validate_limit(concurrency_limit)
        self.last_job: Optional[BatchJob] = None

    @property
    def peak_in_flight(self) -> int:
        """Highest number of simultaneously running pipelines in the most recent run."""
        return self.last_job.peak_active if self.last_job else 0

    async def run(
        self,
        companies: Sequence[str],
        fields: Sequence[str],
        credential: Optional[str] = None,
        concurrency_limit: Optional[int] = None,
        on_record: Optional[Callable[[CompanyRecord], None]] = None,
    ) -> List[CompanyRecord]:
        """
        Research every company and collect one record each.

        Args:
            companies: Company names; duplicates are researched separately
            fields: Field names requested for every company
            credential: Provider API key shared by every pipeline
            concurrency_limit: Override the scheduler's default limit
            on_record: Called once per completed record, in completion order.
                An exception it raises is logged and does not stop the batch.

        Returns:
            One CompanyRecord per input company, in completion order

        Raises:
            ValidationError: Empty field list or limit below 1
        """
        limit = _validate_limit(
            self.concurrency_limit if concurrency_limit is None else concurrency_limit
        )
        if not fields:
            raise ValidationError("At least one field is required")

        companies = list(companies)
        job = BatchJob(total=len(companies), concurrency_limit=limit)
        self.last_job = job

        if not companies:
            return []

        semaphore = asyncio.Semaphore(limit)

        async def process(index: int, company: str) -> CompanyRecord:
            async with semaphore:
                job.admit()
                if job.state == "draining":
                    slogger.batch_status("draining", {"in_flight": job.active})
                try:
                    results = await self.pipeline.run(company, fields, credential)
                    return CompanyRecord(company=company, index=index, results=results)
                except Exception as e:
                    _, display_name = format_company_name(company)
                    logger.error("Research failed for %s: %s", display_name, e)
                    return CompanyRecord(company=company, index=index, error=str(e))
                finally:
                    job.release()

        slogger.batch_status(
            "admitting",
            {"companies": job.total, "fields": len(fields), "concurrency_limit": limit},
        )

        tasks = [
            asyncio.create_task(process(index, company))
            for index, company in enumerate(companies)
        ]

        records: List[CompanyRecord] = []
        for next_done in asyncio.as_completed(tasks):
            record = await next_done
            records.append(record)
            job.record(record)
            if on_record:
                try:
                    on_record(record)
                except Exception:
                    _, display_name = format_company_name(record.company)
                    logger.exception("on_record callback failed for %s", display_name)

        slogger.batch_status(
            "done",
            {
                "companies": job.total,
                "completed": job.completed,
                "failed": job.failed,
                "peak_in_flight": job.peak_active,
            },
        )
        return records
