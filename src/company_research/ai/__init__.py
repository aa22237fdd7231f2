"""AI provider access, prompts and response parsing for company research."""

from company_research.ai.completion_client import CompletionClient, CompletionResult
from company_research.ai.prompts import (
    DEFAULT_FIELD_GUIDANCE,
    SYSTEM_PROMPT,
    FieldGuidance,
    ResearchPrompts,
)
from company_research.ai.response_parser import parse_field_lines

__all__ = [
    "CompletionClient",
    "CompletionResult",
    "DEFAULT_FIELD_GUIDANCE",
    "SYSTEM_PROMPT",
    "FieldGuidance",
    "ResearchPrompts",
    "parse_field_lines",
]
