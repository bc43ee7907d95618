"""
FrontDeskStore port — the hotel's relational backend.

Clients, rooms, reservations, notifications, message logs, message
templates and admins all live in
the managed database.  Workflows depend only on this interface; adapters
talk to SQLite, to Supabase over HTTP, or keep everything in memory.

Notifications and message logs are append-only: the only update allowed
is flagging a notification as read.
"""

from abc import ABC, abstractmethod

from src.domain.records import (
    Admin,
    ClientProfile,
    MessageLog,
    MessageTemplate,
    Notification,
    Reservation,
    Room,
    RoomType,
)


class FrontDeskStore(ABC):

    # -- clients -------------------------------------------------------------

    @abstractmethod
    async def find_duplicate(self, whatsapp_number: str, nom: str) -> ClientProfile | None:
        """
        First existing client with the same WhatsApp number, or whose
        full_name contains *nom* (case-insensitive).  An empty *nom*
        only matches on the number.
        """
        ...

    @abstractmethod
    async def find_by_phone(self, phone: str, country_code: str = "") -> ClientProfile | None:
        """Client whose whatsapp_number or phone_number is *phone* or country_code+phone."""
        ...

    @abstractmethod
    async def get_client(self, client_id: str) -> ClientProfile | None:
        ...

    @abstractmethod
    async def list_clients(self) -> list[ClientProfile]:
        """All clients ordered by full_name."""
        ...

    @abstractmethod
    async def insert_client(self, client: ClientProfile) -> ClientProfile:
        """Persist a new client. Returns it with id and created_at filled in."""
        ...

    @abstractmethod
    async def update_client_stats(
        self, client_id: str, total_sejours: int, total_nuits: int, fidelite_score: int
    ) -> None:
        """Overwrite the visit counters and stored loyalty score."""
        ...

    # -- rooms ---------------------------------------------------------------

    @abstractmethod
    async def insert_room_type(self, room_type: RoomType) -> RoomType:
        ...

    @abstractmethod
    async def get_room_type(self, room_type_id: str) -> RoomType | None:
        ...

    @abstractmethod
    async def insert_room(self, room: Room) -> Room:
        ...

    @abstractmethod
    async def get_room(self, room_id: str) -> Room | None:
        ...

    @abstractmethod
    async def list_rooms(self, status: str | None = None) -> list[Room]:
        """Rooms ordered by room_number, optionally filtered by status."""
        ...

    @abstractmethod
    async def set_room_status(self, room_id: str, status: str) -> None:
        ...

    # -- reservations --------------------------------------------------------

    @abstractmethod
    async def insert_reservation(self, reservation: Reservation) -> Reservation:
        ...

    @abstractmethod
    async def list_reservations(self) -> list[Reservation]:
        """All reservations, newest first."""
        ...

    # -- notifications and message logs ---------------------------------------

    @abstractmethod
    async def insert_notification(self, notification: Notification) -> Notification:
        ...

    @abstractmethod
    async def list_notifications(self) -> list[Notification]:
        """All notifications, newest first."""
        ...

    @abstractmethod
    async def mark_notifications_read(self, notification_id: str | None = None) -> int:
        """Flag one notification (or all unread when id is None) as read. Returns the count."""
        ...

    @abstractmethod
    async def insert_message_log(self, log: MessageLog) -> MessageLog:
        ...

    @abstractmethod
    async def list_message_logs(self, limit: int = 50) -> list[MessageLog]:
        """Most recent message logs first."""
        ...

    # -- message templates ---------------------------------------------------

    @abstractmethod
    async def insert_template(self, template: MessageTemplate) -> MessageTemplate:
        ...

    @abstractmethod
    async def get_template(self, template_id: str) -> MessageTemplate | None:
        ...

    @abstractmethod
    async def list_templates(self) -> list[MessageTemplate]:
        """All templates, newest first."""
        ...

    @abstractmethod
    async def update_template(self, template: MessageTemplate) -> None:
        """Overwrite name, content, trigger, days_threshold and is_active by id."""
        ...

    @abstractmethod
    async def delete_template(self, template_id: str) -> None:
        ...

    # -- admins --------------------------------------------------------------

    @abstractmethod
    async def insert_admin(self, admin: Admin) -> Admin:
        ...

    @abstractmethod
    async def find_active_admin(self, phone_number: str) -> Admin | None:
        """Active admin whose phone_number is exactly *phone_number*."""
        ...

    @abstractmethod
    async def list_admins(self) -> list[Admin]:
        """All admins, oldest first."""
        ...

    @abstractmethod
    async def set_admin_active(self, admin_id: str, is_active: bool) -> None:
        ...

    @abstractmethod
    async def delete_admin(self, admin_id: str) -> None:
        ...
