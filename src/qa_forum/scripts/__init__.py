"""Operational scripts for the Q&A forum."""
