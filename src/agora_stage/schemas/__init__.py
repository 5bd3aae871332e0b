"""Pydantic schemas exchanged with the service layer."""
