"""Observable state holders for front ends."""

from travel_log.application.view_models.auth import AuthState, AuthStatus, AuthViewModel
from travel_log.application.view_models.places import (
    PlaceDetailsState,
    PlaceDetailsStatus,
    PlaceOperationState,
    PlaceOperationStatus,
    PlacesState,
    PlacesStatus,
    PlacesViewModel,
)

__all__ = [
    "AuthState",
    "AuthStatus",
    "AuthViewModel",
    "PlaceDetailsState",
    "PlaceDetailsStatus",
    "PlaceOperationState",
    "PlaceOperationStatus",
    "PlacesState",
    "PlacesStatus",
    "PlacesViewModel",
]
