from hostelkit.services.student.student_lifecycle_service import StudentLifecycleService

__all__ = ["StudentLifecycleService"]
