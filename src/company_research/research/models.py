"""
Request and record models for company research.

Request models mirror the JSON bodies accepted by the HTTP API
({company, fields, apiKey} and {companies, fields, apiKey}) and reject
missing or empty values before any provider call is made.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from company_research.exceptions import ValidationError

# Field name → value; value is an answer or the "Unknown" sentinel
ResearchResult = Dict[str, str]


def _require_text(value: Any, what: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{what} must be a non-empty string")
    return value.strip()


def _require_text_list(values: Any, what: str) -> List[str]:
    if not isinstance(values, list) or not values:
        raise ValueError(f"{what} must be a non-empty list")
    return [_require_text(v, f"each entry in {what}") for v in values]


class _ResearchRequestBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    field_names: List[str] = Field(alias="fields")
    credential: str = Field(alias="apiKey")

    @field_validator("field_names", mode="before")
    @classmethod
    def _check_fields(cls, value: Any) -> List[str]:
        return _require_text_list(value, "fields")

    @field_validator("credential", mode="before")
    @classmethod
    def _check_credential(cls, value: Any) -> str:
        return _require_text(value, "apiKey")

    @classmethod
    def from_payload(cls, payload: Any):
        """
        Validate a request body.

        Accepts "credential" as an alias for "apiKey".

        Raises:
            ValidationError: On a non-object body or missing or empty
                required values
        """
        if payload is not None and not isinstance(payload, dict):
            raise ValidationError("Request body must be a JSON object")

        data = dict(payload or {})
        if "apiKey" not in data and "credential" in data:
            data["apiKey"] = data.pop("credential")

        try:
            return cls.model_validate(data)
        except PydanticValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'body'}: {err['msg']}"
                for err in e.errors()
            )
            raise ValidationError(f"Missing required parameters ({problems})") from e


class ResearchRequest(_ResearchRequestBase):
    """Single-company research request."""

    company: str

    @field_validator("company", mode="before")
    @classmethod
    def _check_company(cls, value: Any) -> str:
        return _require_text(value, "company")


class BatchResearchRequest(_ResearchRequestBase):
    """Batch research request."""

    companies: List[str]

    @field_validator("companies", mode="before")
    @classmethod
    def _check_companies(cls, value: Any) -> List[str]:
        return _require_text_list(value, "companies")


@dataclass(frozen=True)
class CompanyRecord:
    """Outcome of one company's research pipeline within a batch.

    Exactly one of ``results`` and ``error`` is set. ``index`` is the
    company's position in the batch input so callers can restore order.
    """

    company: str
    index: int
    results: Optional[ResearchResult] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        if self.succeeded:
            return {"company": self.company, "results": dict(self.results or {})}
        return {"company": self.company, "error": self.error}


def sort_records(records: List[CompanyRecord]) -> List[CompanyRecord]:
    """Return records in batch input order."""
    return sorted(records, key=lambda record: record.index)
