"""
Academic Organizer backend package.

Assignments and notes persisted as JSON files, served by a FastAPI app
(importable as organizer_api.main.app).
"""
