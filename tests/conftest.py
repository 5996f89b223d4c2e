from __future__ import annotations

from datetime import datetime, timezone

import pytest

from tests.fakes import (
    FakeComparator,
    InMemoryAttendance,
    InMemoryCompanies,
    InMemoryGeofences,
    InMemoryInvites,
    InMemoryMembers,
    InMemoryPhotos,
)


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 3, 2, 9, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def members() -> InMemoryMembers:
    return InMemoryMembers()


@pytest.fixture
def geofences_repo() -> InMemoryGeofences:
    return InMemoryGeofences()


@pytest.fixture
def photos_repo() -> InMemoryPhotos:
    return InMemoryPhotos()


@pytest.fixture
def attendance_repo() -> InMemoryAttendance:
    return InMemoryAttendance()


@pytest.fixture
def comparator() -> FakeComparator:
    return FakeComparator()


@pytest.fixture
def companies_repo() -> InMemoryCompanies:
    return InMemoryCompanies()


@pytest.fixture
def invites_repo() -> InMemoryInvites:
    return InMemoryInvites()
