"""
Shared service infrastructure: transaction scope and credentials.
"""
from hostelkit.services.common.unit_of_work import SessionFactory, UnitOfWork

__all__ = ["SessionFactory", "UnitOfWork"]
