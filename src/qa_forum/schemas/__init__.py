# src/qa_forum/schemas/__init__.py
"""Pydantic schemas for request/response validation."""
