"""Schemas — Pydantic models for fixed HTML forms."""
