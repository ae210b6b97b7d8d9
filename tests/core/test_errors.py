"""Failure Taxonomy — exhaustive status/category mapping and error envelopes.

Tests:
    - Every FailureKind has a status and a category
    - Status mapping matches the transport contract
    - error_for_kind builds the matching exception for every kind
    - StorageUnavailableError never puts the cause in the user-facing message
"""

import pytest

from maintainership.core.domain_types import PackageRef
from maintainership.core.errors import (
    AlreadyAcceptedError, DomainFailure, ErrorCategory, FailureKind,
    InvalidCursorError, StorageUnavailableError, error_for_kind,
    failure_category, failure_status,
)

WIDGET = PackageRef("acme", "github", "widget")


@pytest.mark.parametrize("kind", list(FailureKind))
def test_every_kind_is_mapped(kind):
    assert failure_status(kind) in {403, 404, 409, 500}
    assert isinstance(failure_category(kind), ErrorCategory)


def test_status_mapping():
    assert failure_status(FailureKind.PACKAGE_NOT_FOUND) == 404
    assert failure_status(FailureKind.INVITATION_NOT_FOUND) == 404
    assert failure_status(FailureKind.INVITEE_NOT_MAINTAINER) == 409
    assert failure_status(FailureKind.ALREADY_ACCEPTED) == 409
    assert failure_status(FailureKind.ALREADY_DECLINED) == 409
    assert failure_status(FailureKind.UNAUTHORIZED) == 403
    assert failure_status(FailureKind.STORAGE_UNAVAILABLE) == 500


@pytest.mark.parametrize("kind", list(FailureKind))
def test_error_for_kind_round_trips_kind(kind):
    error = error_for_kind(kind, "bob", WIDGET)
    assert isinstance(error, DomainFailure)
    assert error.kind is kind
    assert error.http_status == failure_status(kind)
    assert error.code == kind.name


def test_conflict_message_names_namespace_and_package():
    error = AlreadyAcceptedError("bob", WIDGET)
    assert "bob" in error.message
    assert "acme@github/widget" in error.message
    assert error.category is ErrorCategory.CONFLICT


def test_storage_error_hides_cause():
    error = StorageUnavailableError("list maintainers", "connection refused on 10.0.0.3")
    body = error.to_response()["error"]
    assert "10.0.0.3" not in body["message"]
    assert body["kind"] == "storage_unavailable"
    assert error.cause == "connection refused on 10.0.0.3"


def test_invalid_cursor_is_validation_error():
    error = InvalidCursorError("???")
    assert error.http_status == 400
    assert error.kind is None
    assert error.to_response()["error"]["code"] == "INVALID_CURSOR"
