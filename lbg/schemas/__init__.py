"""Pydantic models of the service's wire formats."""
