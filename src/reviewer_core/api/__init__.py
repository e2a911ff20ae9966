"""HTTP API for Reviewer Core."""
