"""Registry Maintainership — invitation lifecycle for package maintainers.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
