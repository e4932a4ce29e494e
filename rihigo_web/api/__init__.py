"""API Layer — FastAPI routes, dependencies, templating and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - Pages render Jinja2 templates; /api/* paths return JSON

Design Decisions:
    - Thin routes: load from the external API, hand the response to a template
"""
