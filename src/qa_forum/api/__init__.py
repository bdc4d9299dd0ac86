"""HTTP API for the Q&A forum."""
