"""Pydantic schemas for lunch polls and loan agreements."""
