"""
Domain Layer - Core Business Types

This layer contains the travel log entities, value objects and the
repository interfaces. It does not depend on any backend or UI concern.
"""
