"""Service Layer — typed wrappers over the external API, one module per area.

Invariants:
    - Each method performs exactly one request through BackendApiClient
    - Services are stateless: the bearer token is passed on every call
    - Services never render, redirect or touch the session
"""
