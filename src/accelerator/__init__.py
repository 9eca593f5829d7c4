"""
Lambda Service Accelerator.

A starting point for AWS Lambda microservices built in three layers:

- handlers: Lambda entry points, REST resolvers and observability
- logic: business services
- dal: a generic DynamoDB repository that builds key condition, filter,
  projection and update expressions, drives pagination and composes
  transactional writes
- models: API contracts, records and messages

Dependencies are wired once per container in accelerator.container.
"""

__version__ = "1.0.0"
