"""Core Layer — pure presentation logic, no IO, no async.

Invariants:
    - No module in core/ imports from services/, api/ or infrastructure/
    - "today" and other ambient inputs are passed in, never read from the clock

Design Decisions:
    - Business rules stay in the external API; core/ only shapes data for templates and forms
"""
