"""
Service layer - Business logic orchestration.

Services coordinate the repository, the query builder and the
aggregation engine.
"""
