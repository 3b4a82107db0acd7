"""
Service layer.

Services receive a session factory and their collaborators through the
constructor; each operation opens its own UnitOfWork per step.
"""
