"""Infrastructure Layer — database sessions, SQL adapters for the core protocols, logging.

Invariants:
    - Implements core/repository_protocols; the core never imports from here
    - SQLAlchemy errors are mapped to StorageUnavailableError before leaving this layer
"""
