"""
OKR Tracker
Blueprint registry.

Each module exposes one Blueprint mounted under /api/v1; create_app()
imports and registers them.
"""
