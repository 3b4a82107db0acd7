"""
Custom Exceptions for the Hostel Management Application

This module defines the exception classes raised by the occupancy,
billing and payment services. Every exception carries a stable error
code and an HTTP status so the API layer can surface it verbatim.
"""

from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorCode(str, Enum):
    """Standard error codes for the application"""
    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    OPERATION_FAILED = "OPERATION_FAILED"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Authorization errors
    AUTHORIZATION_FAILED = "AUTHORIZATION_FAILED"

    # Database errors
    DATABASE_ERROR = "DATABASE_ERROR"
    TRANSACTION_FAILED = "TRANSACTION_FAILED"

    # Resource specific errors
    HOSTEL_NOT_FOUND = "HOSTEL_NOT_FOUND"
    ROOM_NOT_FOUND = "ROOM_NOT_FOUND"
    STUDENT_NOT_FOUND = "STUDENT_NOT_FOUND"
    PAYMENT_NOT_FOUND = "PAYMENT_NOT_FOUND"
    INVOICE_NOT_FOUND = "INVOICE_NOT_FOUND"

    # Occupancy errors
    ROOM_FULL = "ROOM_FULL"
    BED_TAKEN = "BED_TAKEN"
    CAPACITY_UNDERFLOW = "CAPACITY_UNDERFLOW"
    ROOM_OCCUPIED = "ROOM_OCCUPIED"
    DUPLICATE_ROOM = "DUPLICATE_ROOM"

    # Billing & payment errors
    ALREADY_GENERATED = "ALREADY_GENERATED"
    ALREADY_VERIFIED = "ALREADY_VERIFIED"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    RECEIPT_NUMBER_CONFLICT = "RECEIPT_NUMBER_CONFLICT"

    # Lifecycle errors
    PARTIAL_ADMISSION_FAILURE = "PARTIAL_ADMISSION_FAILURE"
    USERNAME_UNAVAILABLE = "USERNAME_UNAVAILABLE"


class BaseAppException(Exception):
    """
    Base exception class for all application exceptions.

    Provides consistent error handling across the application with
    structured error information.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format"""
        return {
            "error": {
                "message": self.message,
                "code": self.error_code.value,
                "details": self.details,
                "type": self.__class__.__name__
            }
        }

    def __str__(self) -> str:
        return f"{self.error_code.value}: {self.message}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message='{self.message}', error_code='{self.error_code.value}')"


# ========================================
# General Application Exceptions
# ========================================

class ValidationError(BaseAppException):
    """Exception raised when data validation fails"""

    def __init__(
        self,
        message: str = "Validation failed",
        field_errors: Optional[Dict[str, List[str]]] = None,
        error_code: ErrorCode = ErrorCode.VALIDATION_ERROR,
        status_code: int = 422
    ):
        details = {"field_errors": field_errors} if field_errors else {}
        super().__init__(message, error_code, details, status_code)


class AuthorizationError(BaseAppException):
    """Exception raised when the acting principal may not perform an operation"""

    def __init__(
        self,
        message: str = "Access denied",
        required_role: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.AUTHORIZATION_FAILED
    ):
        details = {"required_role": required_role} if required_role else {}
        super().__init__(message, error_code, details, 403)


class ResourceNotFoundError(BaseAppException):
    """Exception raised when a requested resource is not found"""

    def __init__(
        self,
        resource_type: str = "Resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.RESOURCE_NOT_FOUND
    ):
        if not message:
            message = f"{resource_type} not found"
            if resource_id:
                message += f" (ID: {resource_id})"

        details = {
            "resource_type": resource_type,
            "resource_id": resource_id
        }
        super().__init__(message, error_code, details, 404)


class HostelNotFoundError(ResourceNotFoundError):
    def __init__(self, hostel_id: Optional[str] = None, message: Optional[str] = None):
        super().__init__("Hostel", hostel_id, message, ErrorCode.HOSTEL_NOT_FOUND)


class RoomNotFoundError(ResourceNotFoundError):
    def __init__(self, room_id: Optional[str] = None, message: Optional[str] = None):
        super().__init__("Room", room_id, message, ErrorCode.ROOM_NOT_FOUND)


class StudentNotFoundError(ResourceNotFoundError):
    def __init__(self, student_id: Optional[str] = None, message: Optional[str] = None):
        super().__init__("Student", student_id, message, ErrorCode.STUDENT_NOT_FOUND)


class PaymentNotFoundError(ResourceNotFoundError):
    def __init__(self, payment_id: Optional[str] = None, message: Optional[str] = None):
        super().__init__("Payment", payment_id, message, ErrorCode.PAYMENT_NOT_FOUND)


class InvoiceNotFoundError(ResourceNotFoundError):
    def __init__(self, invoice_id: Optional[str] = None, message: Optional[str] = None):
        super().__init__("Invoice", invoice_id, message, ErrorCode.INVOICE_NOT_FOUND)


# ========================================
# Database Exceptions
# ========================================

class DatabaseError(BaseAppException):
    """Exception raised when the storage layer fails"""

    def __init__(
        self,
        message: str = "Database operation failed",
        error_code: ErrorCode = ErrorCode.DATABASE_ERROR,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, error_code, details, 500)


class TransactionError(DatabaseError):
    """Raised when a database transaction fails."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        details = {"error_type": type(original_error).__name__} if original_error else {}
        super().__init__(message, ErrorCode.TRANSACTION_FAILED, details)
        self.original_error = original_error


# ========================================
# Occupancy Exceptions
# ========================================

class OccupancyError(BaseAppException):
    """Base class for room/bed occupancy violations"""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        room_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 409
    ):
        merged = {"room_id": room_id}
        merged.update(details or {})
        super().__init__(message, error_code, merged, status_code)
        self.room_id = room_id


class RoomFullError(OccupancyError):
    """Raised when an assignment would exceed the room's bed capacity"""

    def __init__(
        self,
        room_id: Optional[str] = None,
        total_beds: Optional[int] = None,
        occupied_beds: Optional[int] = None,
        message: str = "Room is fully occupied"
    ):
        super().__init__(
            message,
            ErrorCode.ROOM_FULL,
            room_id,
            {"total_beds": total_beds, "occupied_beds": occupied_beds},
        )


class BedTakenError(OccupancyError):
    """Raised when another active student already holds the bed"""

    def __init__(
        self,
        room_id: Optional[str] = None,
        bed_number: Optional[str] = None,
        message: Optional[str] = None
    ):
        super().__init__(
            message or f"Bed {bed_number} is already occupied",
            ErrorCode.BED_TAKEN,
            room_id,
            {"bed_number": bed_number},
        )
        self.bed_number = bed_number


class CapacityUnderflowError(OccupancyError):
    """Raised when a counter change would drop below zero or below occupancy"""

    def __init__(
        self,
        room_id: Optional[str] = None,
        message: str = "Cannot reduce beds below occupied count",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, ErrorCode.CAPACITY_UNDERFLOW, room_id, details)


class RoomOccupiedError(OccupancyError):
    def __init__(self, room_id: Optional[str] = None, occupied_beds: int = 0):
        super().__init__(
            "Cannot delete room with occupied beds",
            ErrorCode.ROOM_OCCUPIED,
            room_id,
            {"occupied_beds": occupied_beds},
        )


class DuplicateRoomError(BaseAppException):
    def __init__(self, room_number: str, hostel_id: Optional[str] = None):
        super().__init__(
            f"Room {room_number} already exists in this hostel",
            ErrorCode.DUPLICATE_ROOM,
            {"room_number": room_number, "hostel_id": hostel_id},
            409,
        )


# ========================================
# Billing & Payment Exceptions
# ========================================

class AlreadyGeneratedError(BaseAppException):
    """Raised when dues for a billing cycle have already been generated"""

    def __init__(self, billing_cycle_id: str, existing_count: int = 0):
        super().__init__(
            f"Invoices for {billing_cycle_id} have already been generated",
            ErrorCode.ALREADY_GENERATED,
            {"billing_cycle_id": billing_cycle_id, "existing_count": existing_count},
            409,
        )
        self.billing_cycle_id = billing_cycle_id
        self.existing_count = existing_count


class InvalidTransitionError(BaseAppException):
    """Raised when a payment status change is not allowed"""

    def __init__(
        self,
        payment_id: Optional[str] = None,
        current_status: Optional[str] = None,
        target_status: Optional[str] = None,
        message: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.INVALID_TRANSITION
    ):
        if not message:
            message = f"Cannot move payment from {current_status} to {target_status}"
        super().__init__(
            message,
            error_code,
            {
                "payment_id": payment_id,
                "current_status": current_status,
                "target_status": target_status,
            },
            409,
        )
        self.current_status = current_status
        self.target_status = target_status


class AlreadyVerifiedError(InvalidTransitionError):
    """Raised when a completed payment is verified or settled again"""

    def __init__(self, payment_id: Optional[str] = None, target_status: Optional[str] = None):
        super().__init__(
            payment_id,
            "COMPLETED",
            target_status,
            message="Payment is already verified",
            error_code=ErrorCode.ALREADY_VERIFIED,
        )


class ReceiptNumberConflictError(BaseAppException):
    def __init__(self, receipt_number: str):
        super().__init__(
            f"Receipt number {receipt_number} is already in use",
            ErrorCode.RECEIPT_NUMBER_CONFLICT,
            {"receipt_number": receipt_number},
            409,
        )


# ========================================
# Student Lifecycle Exceptions
# ========================================

class UsernameUnavailableError(BaseAppException):
    def __init__(self, base_username: str, attempts: int):
        super().__init__(
            f"Could not find a free username for {base_username} after {attempts} attempts",
            ErrorCode.USERNAME_UNAVAILABLE,
            {"base_username": base_username, "attempts": attempts},
            409,
        )


class PartialAdmissionFailure(BaseAppException):
    """
    Raised when an admission fails on an unexpected error after some of its
    records were written. Compensation has already run when this surfaces;
    the message and `cause` describe the original failure.
    """

    def __init__(self, cause: Exception, failed_step: str):
        super().__init__(
            f"Admission failed during {failed_step}: {cause}",
            ErrorCode.PARTIAL_ADMISSION_FAILURE,
            {"failed_step": failed_step, "cause_type": type(cause).__name__},
            500,
        )
        self.cause = cause
        self.failed_step = failed_step


__all__ = [
    'ErrorCode',
    'BaseAppException',
    'ValidationError',
    'AuthorizationError',
    'ResourceNotFoundError',
    'HostelNotFoundError',
    'RoomNotFoundError',
    'StudentNotFoundError',
    'PaymentNotFoundError',
    'InvoiceNotFoundError',
    'DatabaseError',
    'TransactionError',
    'OccupancyError',
    'RoomFullError',
    'BedTakenError',
    'CapacityUnderflowError',
    'RoomOccupiedError',
    'DuplicateRoomError',
    'AlreadyGeneratedError',
    'InvalidTransitionError',
    'AlreadyVerifiedError',
    'ReceiptNumberConflictError',
    'UsernameUnavailableError',
    'PartialAdmissionFailure',
]
