"""Message Formatting — pure functions for user-facing and log messages.

Invariants:
    - All functions are pure (no IO, no async, no DB)
    - Not-Found and Conflict messages name the namespace and package involved
    - operation_failed never includes internal error text
"""

from maintainership.core.domain_types import PackageRef

UNAUTHORIZED = "You are not authorized to perform this action."


# ─── Failures ────────────────────────────────────────────────────

def package_not_found(package: PackageRef) -> str:
    return f'"{package}" does not exist.'


def invitee_not_found(invitee: str) -> str:
    return f'Unknown namespace: "{invitee}".'


def invitation_not_found(member: str, package: PackageRef) -> str:
    return f'No pending invitation for "{member}" to join {package}.'


def invitee_not_maintainer(invitee: str, package: PackageRef) -> str:
    return f"{invitee} was not a maintainer of {package}."


def already_accepted(invitee: str, package: PackageRef) -> str:
    return f'Namespace "{invitee}" is already a maintainer of {package}.'


def already_declined(invitee: str, package: PackageRef) -> str:
    return f'Namespace "{invitee}" has declined the invitation to {package}.'


def operation_failed(operation: str) -> str:
    return f"Caught error while trying to {operation}."


# ─── Confirmations ───────────────────────────────────────────────

def invited(invitee: str, package: PackageRef) -> str:
    return f"{invitee} invited to join the maintainers of {package}."


def already_invited(invitee: str, package: PackageRef) -> str:
    return f"{invitee} already has a pending invitation to join the maintainers of {package}."


def accepted(member: str, package: PackageRef) -> str:
    return f"{member} is now a maintainer for {package}."


def declined(member: str, package: PackageRef) -> str:
    return f"You have declined the invitation for {member} to join {package}."


def removed(invitee: str, package: PackageRef) -> str:
    return f"{invitee} removed as maintainer of {package}."


# ─── Log events ──────────────────────────────────────────────────

def event_line(action: str, actor: str, subject: str, package: PackageRef) -> str:
    """Single-line description of a domain event for the event log."""
    verbs = {
        "maintainer.invited": f"{subject} invited to join the maintainers of {package} by {actor}",
        "maintainer.reinvited": f"{subject} re-invited to join the maintainers of {package} by {actor}",
        "maintainer.accepted": f"{actor} accepted the invitation for {subject} to join {package}",
        "maintainer.declined": f"{actor} declined the invitation for {subject} to join {package}",
        "maintainer.removed": f"{subject} removed as maintainer of {package} by {actor}",
    }
    return verbs.get(action, f"{actor} {action} {subject} on {package}")
