"""Services Layer — MaintainershipService, the imperative shell around the state machine.

Invariants:
    - Services depend on core protocols, never on FastAPI
"""
