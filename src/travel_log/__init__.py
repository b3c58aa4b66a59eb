"""
Travel Log - Personal Travel Journal Client

Record the places you have been: a name, a description, a rating and a
photo, stored in a Firebase project (Cloud Firestore for the records,
Cloud Storage for the photos).

This package provides:
- A place repository with ownership checks and photo cleanup
- Email/password authentication
- Observable state holders for front ends
- The ``travel-log`` command-line interface
"""

__version__ = "1.0.0"
__author__ = "Travel Log Team"
__license__ = "MIT"

from travel_log.domain.entities.place import Place
from travel_log.domain.entities.session import AuthSession
from travel_log.domain.value_objects.access_result import AccessError, AccessErrorKind, AccessResult
from travel_log.domain.value_objects.image_source import ImageSource

__all__ = [
    "AccessError",
    "AccessErrorKind",
    "AccessResult",
    "AuthSession",
    "ImageSource",
    "Place",
]
