"""Application services: orchestration on top of the domain and adapters."""
