"""UX flow analysis assistant."""
