"""Tests for research request and record models."""

import pytest

from company_research.exceptions import ValidationError
from company_research.research.models import (
    BatchResearchRequest,
    CompanyRecord,
    ResearchRequest,
    sort_records,
)


class TestResearchRequest:
    def test_valid_payload(self):
        req = ResearchRequest.from_payload(
            {"company": "  Acme Co ", "fields": ["Website", "ERP System"], "apiKey": "sk-or-test"}
        )
        assert req.company == "Acme Co"
        assert req.field_names == ["Website", "ERP System"]
        assert req.credential == "sk-or-test"

    def test_credential_alias(self):
        req = ResearchRequest.from_payload(
            {"company": "Acme Co", "fields": ["Website"], "credential": "sk-or-test"}
        )
        assert req.credential == "sk-or-test"

    def test_unknown_keys_ignored(self):
        req = ResearchRequest.from_payload(
            {"company": "Acme Co", "fields": ["Website"], "apiKey": "k", "model": "x"}
        )
        assert req.company == "Acme Co"

    @pytest.mark.parametrize(
        "payload",
        [
            None,
            {},
            {"fields": ["Website"], "apiKey": "k"},
            {"company": "", "fields": ["Website"], "apiKey": "k"},
            {"company": "Acme Co", "fields": [], "apiKey": "k"},
            {"company": "Acme Co", "fields": "Website", "apiKey": "k"},
            {"company": "Acme Co", "fields": ["Website", " "], "apiKey": "k"},
            {"company": "Acme Co", "fields": ["Website"]},
            {"company": "Acme Co", "fields": ["Website"], "apiKey": "   "},
        ],
    )
    def test_invalid_payload_raises_validation_error(self, payload):
        with pytest.raises(ValidationError, match="Missing required parameters"):
            ResearchRequest.from_payload(payload)

    @pytest.mark.parametrize("payload", [["company"], "Acme Co", 42])
    def test_non_object_payload_raises_validation_error(self, payload):
        with pytest.raises(ValidationError, match="must be a JSON object"):
            ResearchRequest.from_payload(payload)


class TestBatchResearchRequest:
    def test_valid_payload(self):
        req = BatchResearchRequest.from_payload(
            {"companies": ["Acme Co", "Globex"], "fields": ["Website"], "apiKey": "k"}
        )
        assert req.companies == ["Acme Co", "Globex"]

    @pytest.mark.parametrize("companies", [None, [], ["Acme Co", ""], "Acme Co"])
    def test_invalid_companies(self, companies):
        with pytest.raises(ValidationError):
            BatchResearchRequest.from_payload(
                {"companies": companies, "fields": ["Website"], "apiKey": "k"}
            )


class TestCompanyRecord:
    def test_success_dict(self):
        record = CompanyRecord(company="Acme Co", index=0, results={"Website": "https://acme.com"})
        assert record.succeeded
        assert record.to_dict() == {"company": "Acme Co", "results": {"Website": "https://acme.com"}}

    def test_error_dict(self):
        record = CompanyRecord(company="Acme Co", index=0, error="HTTP 500")
        assert not record.succeeded
        assert record.to_dict() == {"company": "Acme Co", "error": "HTTP 500"}

    def test_sort_records(self):
        records = [
            CompanyRecord(company="C", index=2, results={}),
            CompanyRecord(company="A", index=0, results={}),
            CompanyRecord(company="B", index=1, error="x"),
        ]
        assert [r.company for r in sort_records(records)] == ["A", "B", "C"]
