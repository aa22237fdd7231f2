"""Company research orchestration: single-company pipeline and batch scheduling."""

from company_research.research.batch import BatchJob, BatchScheduler
from company_research.research.enhancer import UnknownFieldEnhancer, find_unknown_fields
from company_research.research.models import (
    BatchResearchRequest,
    CompanyRecord,
    ResearchRequest,
    ResearchResult,
    sort_records,
)
from company_research.research.pipeline import ResearchPipeline, fill_missing_fields
from company_research.research.researcher import CompanyResearcher
from company_research.research.service import research_batch, research_company

__all__ = [
    "BatchJob",
    "BatchScheduler",
    "BatchResearchRequest",
    "CompanyRecord",
    "CompanyResearcher",
    "ResearchPipeline",
    "ResearchRequest",
    "ResearchResult",
    "UnknownFieldEnhancer",
    "fill_missing_fields",
    "find_unknown_fields",
    "research_batch",
    "research_company",
    "sort_records",
]
