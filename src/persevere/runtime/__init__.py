"""Runtime - retry scopes, retriable blocks, and their observability."""
