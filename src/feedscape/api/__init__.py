"""HTTP API for feedscape."""
