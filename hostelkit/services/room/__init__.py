from hostelkit.services.room.room_service import RoomService

__all__ = ["RoomService"]
