"""Prompt templates for AI company research."""

from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional, Sequence

from company_research.constants import DEFAULT_FIELD_HINT, UNKNOWN

# Search strategy per well-known field
DEFAULT_FIELD_GUIDANCE = MappingProxyType(
    {
        "Company name": "Check company website, LinkedIn, or official registration",
        "Website": "Search for official company website",
        "Billing State/Province": (
            "Check company address on LinkedIn, official website contact page, "
            "or BuiltWith.com/meta"
        ),
        "Company Established Year": "Check About Us page, company history, LinkedIn, or Wikipedia",
        "Industry/Vertical": "Check company description, LinkedIn, annual reports",
        "Business Coverage": "Check products/services pages to determine if B2B, B2C, or both",
        "Company Revenue": (
            "Search for annual reports, press releases, financial news, or Crunchbase"
        ),
        "Total Employee": "Check LinkedIn, company about page, or recent press releases",
        "Total Customer Service Agent": (
            "Estimate from LinkedIn employee count with customer service titles"
        ),
        "Customer Service Challenges": (
            "Search recent interviews, news articles, or glassdoor reviews"
        ),
        "Customer Service Technology Challenges": (
            "Search tech blogs, interviews with company CTO/CIO"
        ),
        "Competition Landscape": "Check industry reports, market analysis websites",
        "Rank and Market %": "Look for market research reports, industry publications",
        "Key Updates": "Check company news page, press releases from last 6 months",
        "Financial Status": "Check recent financial news, funding announcements",
        "PE Backing": "Check Crunchbase, PitchBook, company investor page",
        "eCommerce Platform": "Use BuiltWith.com, check page source code",
        "Customer Service Ticketing System": (
            "Use BuiltWith.com, check job listings for required skills"
        ),
        "LiveChat Tool": "Check website for chat widgets, use BuiltWith.com",
        "Site Traffic": "Check SimilarWeb, Alexa rankings",
        "ERP System": "Check job listings, LinkedIn employee skills, tech stack articles",
    }
)

SYSTEM_PROMPT = f"""You are a professional analyst on company/industry reports. Please help me populate company data for the requested fields.

## Important Notes:

1. Do not make assumptions about any data points
2. If information cannot be verified through reliable sources, please mark as "{UNKNOWN}"
3. For all research-based fields, please provide the source URL or reference
4. For technical stack information, use BuiltWith.com and Wappalyzer as the primary source
5. Only include information that can be verified through public sources
6. Please provide the result in CSV format, with each field on a separate line in the format "Field Name, Value".
7. Please ensure that the response only contains data in CSV format, without any additional explanations or prefaces.

## Field Notes:

- Industry/Vertical: according to the Global Industry Classification Standard (GICS), accurate to sub-industries
- Business Coverage: B2B, B2C, or Both
- Key Updates: recent significant news (last 6 months), 3-5 bullets, prioritizing customer service updates
- Billing State/Province: look up https://builtwith.com/meta/{{company_website}} and search Location in the page source
- eCommerce Platform, Customer Service Ticketing System, LiveChat Tool, ERP System: look up https://builtwith.com/{{company_website}} and search the page source

## Response Format:

- List each field with its verified information
- Include source URLs for each data point where applicable
- Mark unavailable information as "{UNKNOWN}"
- Provide the result in CSV format, one field per line, as "Field Name, Value"
- The response must contain only CSV data, without explanations or prefaces
"""

FOLLOWUP_SOURCES = (
    "Information from BuiltWith: https://builtwith.com/{company_website} and "
    "https://builtwith.com/meta/{company_website}",
    "LinkedIn data",
    "Job postings (to infer systems and tools)",
    "Employee profiles and skills",
    "Company technology stack articles",
    "Industry-specific databases",
)


class FieldGuidance:
    """Read-only lookup of search-strategy hints per field name.

    Built once from DEFAULT_FIELD_GUIDANCE plus any configured overrides and
    shared by every research call.
    """

    def __init__(
        self,
        overrides: Optional[Mapping[str, str]] = None,
        default_hint: str = DEFAULT_FIELD_HINT,
    ):
        merged = dict(DEFAULT_FIELD_GUIDANCE)
        merged.update(overrides or {})
        self._hints = MappingProxyType(merged)
        self._default_hint = default_hint

    @property
    def hints(self) -> Mapping[str, str]:
        return self._hints

    def hint_for(self, field_name: str) -> str:
        return self._hints.get(field_name, self._default_hint)

    def __contains__(self, field_name: str) -> bool:
        return field_name in self._hints

    def __len__(self) -> int:
        return len(self._hints)


def unique_fields(fields: Iterable[str]) -> List[str]:
    """Drop duplicate field names, keeping first-seen order."""
    seen = set()
    ordered = []
    for name in fields:
        if name not in seen:
            seen.add(name)
            ordered.append(name)
    return ordered


class ResearchPrompts:
    """Prompt templates for the initial research and follow-up passes."""

    def __init__(self, guidance: Optional[FieldGuidance] = None, system_prompt: str = SYSTEM_PROMPT):
        self.guidance = guidance or FieldGuidance()
        self.system_prompt = system_prompt

    def build_field_instructions(self, fields: Sequence[str]) -> str:
        """
        Build one "- Field: hint" line per requested field.

        Args:
            fields: Requested field names (duplicates are collapsed).

        Returns:
            Newline-joined instruction lines.
        """
        return "\n".join(
            f"- {name}: {self.guidance.hint_for(name)}" for name in unique_fields(fields)
        )

    def build_research_prompt(self, company: str, fields: Sequence[str]) -> str:
        """
        Build the initial research prompt for one company.

        Args:
            company: Company name.
            fields: Requested field names.

        Returns:
            User prompt text.
        """
        instructions = self.build_field_instructions(fields)

        return f"""Research company "{company}" thoroughly using the following search strategy for each field:

{instructions}

IMPORTANT INSTRUCTIONS:
1. Actively search for each field, don't just rely on general knowledge
2. For technical fields (eCommerce Platform, Ticketing System, etc.), check BuiltWith.com for "{company}" and examine page source
3. For employee/revenue data, check LinkedIn, Crunchbase, and recent news
4. If exact data isn't available, provide best estimate with source
5. Don't mark fields "{UNKNOWN}" without trying multiple search strategies
6. Include source URLs for all information
7. Output one field per line, with no header row

Format as CSV: "Field Name, Value (Source: URL)\""""

    def build_followup_prompt(self, company: str, unknown_fields: Sequence[str]) -> str:
        """
        Build the narrower follow-up prompt for fields still unknown.

        Args:
            company: Company name.
            unknown_fields: Field names whose value is still the Unknown sentinel.

        Returns:
            User prompt text naming only the unknown fields.
        """
        sources = "\n".join(f"{i}. {source}" for i, source in enumerate(FOLLOWUP_SOURCES, start=1))

        return f"""For company "{company}", I'm missing the following information:
{", ".join(unknown_fields)}

Please do targeted research specifically for these fields. Try using:
{sources}

Format results as CSV with source URLs: "Field Name, Value (Source: URL)\""""
