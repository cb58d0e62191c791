"""Application services: framework-agnostic orchestration over units of work."""
