"""ORM Models — SQLAlchemy declarative models for the registry entities this service touches.

Invariants:
    - All models inherit from Base (db/base.py)
    - Only Maintainer is written by this service; Namespace, NamespaceMember, Package are read

Design Decisions:
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from maintainership.models.namespace import Namespace, NamespaceMember  # noqa: F401
from maintainership.models.package import Package  # noqa: F401
from maintainership.models.maintainer import Maintainer  # noqa: F401
