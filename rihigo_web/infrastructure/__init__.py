"""Infrastructure Layer — external service clients and cross-cutting concerns.

Invariants:
    - Infrastructure never renders templates or reads request state
    - Transport failures from the external API are mapped to ApiResponse, never raised
"""
