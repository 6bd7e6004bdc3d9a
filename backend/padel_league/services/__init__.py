"""
Services Layer

Scheduling operations that span several tables:
- Accept domain inputs (IDs, sessions, request dataclasses)
- Return plain result objects with to_dict()
- Do NOT depend on HTTP request/response objects
"""
