"""Database Declarations — the SQLAlchemy Base shared by models and migrations.

Design Decisions:
    - Engine and session lifecycle live in infrastructure/database.py; this package
      only owns table metadata
"""
