"""
Schemas module - Pydantic models for API request/response validation.
"""
