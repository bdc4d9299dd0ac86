"""Domain services for the Q&A forum."""
