"""Pydantic request, response and result schemas."""
