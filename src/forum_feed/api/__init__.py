"""HTTP API for the forum feed service."""
