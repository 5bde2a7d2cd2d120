"""
Inspection form engine.

- `models`: Form / Section / Field / Template entities
- `mutations`: pure edit operations over a form tree
- `storage`: remote (Supabase) + local persistence behind one service
- `synthesis`: rule-based template generation and modification
- `api`: FastAPI surface for the UI layer
"""

__version__ = "0.1.0"
