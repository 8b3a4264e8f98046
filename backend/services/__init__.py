"""Service layer: authorization and business rules for tasks and accounts."""
