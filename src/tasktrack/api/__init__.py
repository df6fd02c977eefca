"""API layer: canonical query surface for task and event aggregates.

This module provides the stable read model API. Key rules:

1. No SQLAlchemy imports - only Session for type hints
2. Filtering and ordering are expressed as predicates and sort keys, never SQL
3. Return Pydantic models only
4. Both loader phases run inside one read scope
"""
