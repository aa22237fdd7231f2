"""AI-assisted company research: enrich company lists with researched fields."""

__version__ = "0.1.0"
