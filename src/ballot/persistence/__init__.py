"""Audit trail — append-only election event log."""
