"""Rihigo Web — server-rendered marketplace front end for the Rihigo API.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
