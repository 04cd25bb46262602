"""Pydantic schemas for the forum feed API."""
