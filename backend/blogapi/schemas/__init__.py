# Schemas package init
"""Pydantic request/response contracts and the response envelope."""
