"""Domain layer — item values, predicates, filters, and history records.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, commands, or config.
"""
