"""Pydantic data models for prompt-composer."""
