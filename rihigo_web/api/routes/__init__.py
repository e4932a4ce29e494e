"""Route Modules — one file per portal area.

Invariants:
    - Each module defines its own APIRouter with prefix and tags
    - Routes never contain business logic (the external API owns it)
"""
