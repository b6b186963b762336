"""Concrete adapters (HTTP client, form submitter)."""
