#!/usr/bin/env python3
"""
Flask HTTP API for company research.

Endpoints:
- POST /api/research: research one company
- POST /api/batch-research: research many companies with bounded concurrency
- GET /api/health: liveness probe

Each request runs its research coroutine to completion with asyncio.run, so
a batch request holds its worker thread until every company has a record.
"""
import asyncio
import os
import sys
from datetime import datetime, timezone
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from company_research.ai.completion_client import CompletionClient
from company_research.exceptions import (
    ConnectivityError,
    ProviderError,
    ResearchError,
    ValidationError,
)
from company_research.logging_config import get_structured_logger, setup_logging
from company_research.research.models import BatchResearchRequest, ResearchRequest
from company_research.research.service import ClientFactory, research_batch, research_company
from company_research.settings import ResearchSettings, get_research_settings

slogger = get_structured_logger(__name__)


def _error(message: str, status: int):
    return jsonify({"error": message}), status


def create_app(
    settings: Optional[ResearchSettings] = None,
    client_factory: ClientFactory = CompletionClient.from_settings,
) -> Flask:
    """
    Build the Flask application.

    Args:
        settings: Research settings (loaded from config/env when omitted)
        client_factory: Builds a completion client for a request's credential

    Returns:
        Configured Flask app
    """
    app = Flask(__name__)
    # Keep requested field order in JSON results
    app.json.sort_keys = False
    app.config["RESEARCH_SETTINGS"] = settings or get_research_settings()
    app.config["CLIENT_FACTORY"] = client_factory

    @app.errorhandler(ValidationError)
    def handle_validation_error(e: ValidationError):
        return _error(str(e), 400)

    @app.errorhandler(ConnectivityError)
    def handle_connectivity_error(e: ConnectivityError):
        slogger.logger.error("Provider unreachable: %s", e)
        return _error(str(e), 504)

    @app.errorhandler(ProviderError)
    def handle_provider_error(e: ProviderError):
        slogger.logger.error("Provider error: %s", e)
        return _error(str(e), 502)

    @app.errorhandler(ResearchError)
    def handle_research_error(e: ResearchError):
        slogger.logger.error("Research error: %s", e, exc_info=True)
        return _error(str(e), 500)

    @app.errorhandler(Exception)
    def handle_unexpected_error(e: Exception):
        if isinstance(e, HTTPException):
            return e
        slogger.logger.error("Unexpected error: %s", e, exc_info=True)
        return _error(str(e), 500)

    @app.route("/api/health")
    def health():
        """Health check endpoint."""
        return jsonify({"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()})

    @app.route("/api/research", methods=["POST"])
    def research():
        """Research one company."""
        req = ResearchRequest.from_payload(request.get_json(silent=True))

        results = asyncio.run(
            research_company(
                req.company,
                req.field_names,
                req.credential,
                settings=app.config["RESEARCH_SETTINGS"],
                client_factory=app.config["CLIENT_FACTORY"],
            )
        )
        return jsonify({"success": True, "company": req.company, "results": results})

    @app.route("/api/batch-research", methods=["POST"])
    def batch_research():
        """Research a list of companies; per-company failures become error entries."""
        req = BatchResearchRequest.from_payload(request.get_json(silent=True))

        records = asyncio.run(
            research_batch(
                req.companies,
                req.field_names,
                req.credential,
                settings=app.config["RESEARCH_SETTINGS"],
                client_factory=app.config["CLIENT_FACTORY"],
            )
        )
        return jsonify({"success": True, "results": [record.to_dict() for record in records]})

    return app


def main():
    """Main entry point."""
    load_dotenv()
    setup_logging(log_file=os.getenv("RESEARCH_LOG_FILE"))

    try:
        app = create_app()
    except ResearchError as e:
        slogger.logger.error(f"Failed to start research API: {e}", exc_info=True)
        return 1

    port = int(os.getenv("PORT", "5001"))
    host = os.getenv("HOST", "0.0.0.0")

    slogger.worker_status("flask_server_starting", {"host": host, "port": port})
    app.run(host=host, port=port, debug=False, use_reloader=False)
    return 0


if __name__ == "__main__":
    sys.exit(main())
