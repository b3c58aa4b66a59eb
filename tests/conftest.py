"""Shared fixtures."""

from datetime import datetime, timedelta, timezone

import pytest

from travel_log.infrastructure.backend.memory import (
    InMemoryBlobStore,
    InMemoryDocumentStore,
    InMemoryIdentityProvider,
)
from travel_log.infrastructure.repositories.places_repository import PlacesRepository


class TickingClock:
    """Clock that advances one minute per call, so creation order is stable."""

    def __init__(self, start: datetime = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)):
        self.current = start

    def __call__(self) -> datetime:
        self.current += timedelta(minutes=1)
        return self.current


@pytest.fixture
def identity() -> InMemoryIdentityProvider:
    return InMemoryIdentityProvider()


@pytest.fixture
def documents() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def blobs() -> InMemoryBlobStore:
    return InMemoryBlobStore()


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def repository(documents, blobs, identity, clock) -> PlacesRepository:
    return PlacesRepository(documents, blobs, identity, clock=clock)
