"""Application services for the matching engine."""
