"""Workflow state and statistics-exclusion domain."""
