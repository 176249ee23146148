"""
Services Layer

Business logic over the storage collaborator:
- Accept domain inputs (IDs, candidate models)
- Return domain outputs (models, read views) or None/False on rejection
- Do NOT depend on how records are physically stored
"""
