"""Listing and loading active appointment types."""

from unittest.mock import MagicMock

import pytest

from booking_engine.core.exceptions import NotFoundException
from booking_engine.services.appointment_type_service import AppointmentTypeService


@pytest.fixture
def repository():
    return MagicMock()


def test_list_active_types_delegates_to_repository(db, repository):
    repository.list_active_for_instructor.return_value = ["a", "b"]
    service = AppointmentTypeService(db, repository=repository)
    assert service.list_active_types("inst-1") == ["a", "b"]
    repository.list_active_for_instructor.assert_called_once_with("inst-1")


def test_get_active_type_rejects_inactive(db, repository):
    repository.get_by_id.return_value = MagicMock(is_active=False)
    with pytest.raises(NotFoundException):
        AppointmentTypeService(db, repository=repository).get_active_type("type-1")


def test_get_active_type_rejects_missing(db, repository):
    repository.get_by_id.return_value = None
    with pytest.raises(NotFoundException):
        AppointmentTypeService(db, repository=repository).get_active_type("type-1")
