"""In-memory adapter for FrontDeskStore — for tests and local development."""

import uuid
from dataclasses import replace
from datetime import datetime, timezone

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
from src.domain.store import FrontDeskStore


def _new_id() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryFrontDeskStore(FrontDeskStore):
    """
    Plain dicts and lists, insertion ordered.  No mocking framework needed.

    Newest-first listings reverse insertion order, so records created in the
    same microsecond still come back in a stable order.
    """

    def __init__(self):
        self._clients: dict[str, ClientProfile] = {}
        self._room_types: dict[str, RoomType] = {}
        self._rooms: dict[str, Room] = {}
        self._reservations: list[Reservation] = []
        self._notifications: list[Notification] = []
        self._message_logs: list[MessageLog] = []
        self._templates: list[MessageTemplate] = []
        self._admins: list[Admin] = []

    # -- clients -------------------------------------------------------------

    async def find_duplicate(self, whatsapp_number: str, nom: str) -> ClientProfile | None:
        needle = nom.strip().lower()
        for client in self._clients.values():
            if whatsapp_number and client.whatsapp_number == whatsapp_number:
                return client
            if needle and needle in client.full_name.lower():
                return client
        return None

    async def find_by_phone(self, phone: str, country_code: str = "") -> ClientProfile | None:
        candidates = {phone, f"{country_code}{phone}"}
        for client in self._clients.values():
            if client.whatsapp_number in candidates or client.phone_number in candidates:
                return client
        return None

    async def get_client(self, client_id: str) -> ClientProfile | None:
        return self._clients.get(client_id)

    async def list_clients(self) -> list[ClientProfile]:
        return sorted(self._clients.values(), key=lambda c: c.full_name)

    async def insert_client(self, client: ClientProfile) -> ClientProfile:
        stored = replace(client, id=client.id or _new_id(), created_at=client.created_at or _now())
        self._clients[stored.id] = stored
        return stored

    async def update_client_stats(
        self, client_id: str, total_sejours: int, total_nuits: int, fidelite_score: int
    ) -> None:
        client = self._clients.get(client_id)
        if client is None:
            return
        self._clients[client_id] = replace(
            client,
            total_sejours=total_sejours,
            total_nuits=total_nuits,
            fidelite_score=fidelite_score,
        )

    # -- rooms ---------------------------------------------------------------

    async def insert_room_type(self, room_type: RoomType) -> RoomType:
        stored = replace(room_type, id=room_type.id or _new_id())
        self._room_types[stored.id] = stored
        return stored

    async def get_room_type(self, room_type_id: str) -> RoomType | None:
        return self._room_types.get(room_type_id)

    async def insert_room(self, room: Room) -> Room:
        stored = replace(room, id=room.id or _new_id())
        self._rooms[stored.id] = stored
        return stored

    async def get_room(self, room_id: str) -> Room | None:
        return self._rooms.get(room_id)

    async def list_rooms(self, status: str | None = None) -> list[Room]:
        rooms = [r for r in self._rooms.values() if status is None or r.status == status]
        return sorted(rooms, key=lambda r: r.room_number)

    async def set_room_status(self, room_id: str, status: str) -> None:
        room = self._rooms.get(room_id)
        if room is not None:
            self._rooms[room_id] = replace(room, status=status)

    # -- reservations --------------------------------------------------------

    async def insert_reservation(self, reservation: Reservation) -> Reservation:
        stored = replace(
            reservation,
            id=reservation.id or _new_id(),
            created_at=reservation.created_at or _now(),
        )
        self._reservations.append(stored)
        return stored

    async def list_reservations(self) -> list[Reservation]:
        return list(reversed(self._reservations))

    # -- notifications and message logs ---------------------------------------

    async def insert_notification(self, notification: Notification) -> Notification:
        stored = replace(
            notification,
            id=notification.id or _new_id(),
            date=notification.date or _now(),
        )
        self._notifications.append(stored)
        return stored

    async def list_notifications(self) -> list[Notification]:
        return list(reversed(self._notifications))

    async def mark_notifications_read(self, notification_id: str | None = None) -> int:
        count = 0
        for i, n in enumerate(self._notifications):
            if n.lu or (notification_id is not None and n.id != notification_id):
                continue
            self._notifications[i] = replace(n, lu=True)
            count += 1
        return count

    async def insert_message_log(self, log: MessageLog) -> MessageLog:
        stored = replace(log, id=log.id or _new_id(), date=log.date or _now())
        self._message_logs.append(stored)
        return stored

    async def list_message_logs(self, limit: int = 50) -> list[MessageLog]:
        return list(reversed(self._message_logs))[:limit]

    # -- message templates ---------------------------------------------------

    async def insert_template(self, template: MessageTemplate) -> MessageTemplate:
        stored = replace(
            template,
            id=template.id or _new_id(),
            created_at=template.created_at or _now(),
        )
        self._templates.append(stored)
        return stored

    async def get_template(self, template_id: str) -> MessageTemplate | None:
        return next((t for t in self._templates if t.id == template_id), None)

    async def list_templates(self) -> list[MessageTemplate]:
        return list(reversed(self._templates))

    async def update_template(self, template: MessageTemplate) -> None:
        for i, t in enumerate(self._templates):
            if t.id == template.id:
                self._templates[i] = replace(template, created_at=t.created_at)

    async def delete_template(self, template_id: str) -> None:
        self._templates = [t for t in self._templates if t.id != template_id]

    # -- admins --------------------------------------------------------------

    async def insert_admin(self, admin: Admin) -> Admin:
        stored = replace(admin, id=admin.id or _new_id(), created_at=admin.created_at or _now())
        self._admins.append(stored)
        return stored

    async def find_active_admin(self, phone_number: str) -> Admin | None:
        return next(
            (a for a in self._admins if a.is_active and a.phone_number == phone_number), None
        )

    async def list_admins(self) -> list[Admin]:
        return list(self._admins)

    async def set_admin_active(self, admin_id: str, is_active: bool) -> None:
        for i, a in enumerate(self._admins):
            if a.id == admin_id:
                self._admins[i] = replace(a, is_active=is_active)

    async def delete_admin(self, admin_id: str) -> None:
        self._admins = [a for a in self._admins if a.id != admin_id]
