"""
Business Logic Layer Module.

This module contains the services that sit between the Lambda handlers and
the data access layer: example data items, the example external dependency
and the health check. Shared building blocks (secrets, request body
validation, signed API calls) live in the common subpackage.
"""
