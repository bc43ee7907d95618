from datetime import date, datetime

import requests

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

_CLIENT_FIELDS = (
    "full_name", "nom", "postnom", "prenom", "whatsapp_number", "whatsapp_country_code",
    "phone_number", "email", "nationality", "matricule", "document_type", "commentaire",
    "total_sejours", "total_nuits", "fidelite_score", "is_vip", "is_duplicate", "statut",
    "attribue_par",
)


def _parse_dt(value: str | None) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _quote(value: str) -> str:
    """Quote a value for use inside a PostgREST or=(...) filter."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


class SupabaseFrontDeskStore(FrontDeskStore):
    """Adapter: the hotel's Supabase project, through its PostgREST API."""

    def __init__(self, url: str, api_key: str):
        self.base_url = f"{url.rstrip('/')}/rest/v1"
        self.session = requests.Session()
        self.session.headers.update(
            {
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
                "Prefer": "return=representation",
            }
        )

    # -- HTTP helpers --------------------------------------------------------

    def _select(self, table: str, params: dict) -> list[dict]:
        resp = self.session.get(f"{self.base_url}/{table}", params={"select": "*", **params})
        resp.raise_for_status()
        return resp.json()

    def _insert(self, table: str, payload: dict) -> dict:
        resp = self.session.post(f"{self.base_url}/{table}", json=payload)
        resp.raise_for_status()
        return resp.json()[0]

    def _update(self, table: str, params: dict, payload: dict) -> list[dict]:
        resp = self.session.patch(f"{self.base_url}/{table}", params=params, json=payload)
        resp.raise_for_status()
        return resp.json()

    def _delete(self, table: str, params: dict) -> None:
        resp = self.session.delete(f"{self.base_url}/{table}", params=params)
        resp.raise_for_status()

    # -- clients -------------------------------------------------------------

    async def find_duplicate(self, whatsapp_number: str, nom: str) -> ClientProfile | None:
        filters = []
        if whatsapp_number:
            filters.append(f"whatsapp_number.eq.{_quote(whatsapp_number)}")
        if nom.strip():
            filters.append(f"full_name.ilike.{_quote('*' + nom.strip() + '*')}")
        if not filters:
            return None
        rows = self._select(
            "clients",
            {"or": f"({','.join(filters)})", "order": "created_at.asc", "limit": 1},
        )
        return self._to_client(rows[0]) if rows else None

    async def find_by_phone(self, phone: str, country_code: str = "") -> ClientProfile | None:
        prefixed = f"{country_code}{phone}"
        filters = ",".join([
            f"whatsapp_number.eq.{_quote(phone)}",
            f"whatsapp_number.eq.{_quote(prefixed)}",
            f"phone_number.eq.{_quote(phone)}",
            f"phone_number.eq.{_quote(prefixed)}",
        ])
        rows = self._select(
            "clients", {"or": f"({filters})", "order": "created_at.asc", "limit": 1}
        )
        return self._to_client(rows[0]) if rows else None

    async def get_client(self, client_id: str) -> ClientProfile | None:
        rows = self._select("clients", {"id": f"eq.{client_id}"})
        return self._to_client(rows[0]) if rows else None

    async def list_clients(self) -> list[ClientProfile]:
        return [self._to_client(r) for r in self._select("clients", {"order": "full_name.asc"})]

    async def insert_client(self, client: ClientProfile) -> ClientProfile:
        payload = {name: getattr(client, name) for name in _CLIENT_FIELDS}
        payload["tags"] = list(client.tags)
        if client.id:
            payload["id"] = client.id
        return self._to_client(self._insert("clients", payload))

    async def update_client_stats(
        self, client_id: str, total_sejours: int, total_nuits: int, fidelite_score: int
    ) -> None:
        self._update(
            "clients",
            {"id": f"eq.{client_id}"},
            {
                "total_sejours": total_sejours,
                "total_nuits": total_nuits,
                "fidelite_score": fidelite_score,
            },
        )

    @staticmethod
    def _to_client(c: dict) -> ClientProfile:
        return ClientProfile(
            id=c["id"],
            full_name=c.get("full_name") or "",
            nom=c.get("nom") or "",
            postnom=c.get("postnom") or "",
            prenom=c.get("prenom") or "",
            whatsapp_number=c.get("whatsapp_number") or "",
            whatsapp_country_code=c.get("whatsapp_country_code") or "+243",
            phone_number=c.get("phone_number"),
            email=c.get("email"),
            nationality=c.get("nationality"),
            matricule=c.get("matricule"),
            document_type=c.get("document_type"),
            commentaire=c.get("commentaire"),
            total_sejours=c.get("total_sejours") or 0,
            total_nuits=c.get("total_nuits") or 0,
            fidelite_score=c.get("fidelite_score") or 0,
            is_vip=bool(c.get("is_vip")),
            is_duplicate=bool(c.get("is_duplicate")),
            tags=tuple(c.get("tags") or ()),
            statut=c.get("statut") or "actif",
            attribue_par=c.get("attribue_par") or "admin",
            created_at=_parse_dt(c.get("created_at")),
        )

    # -- rooms ---------------------------------------------------------------

    async def insert_room_type(self, room_type: RoomType) -> RoomType:
        payload = {
            "name": room_type.name,
            "description": room_type.description,
            "base_price": room_type.base_price,
        }
        if room_type.id:
            payload["id"] = room_type.id
        return self._to_room_type(self._insert("room_types", payload))

    async def get_room_type(self, room_type_id: str) -> RoomType | None:
        rows = self._select("room_types", {"id": f"eq.{room_type_id}"})
        return self._to_room_type(rows[0]) if rows else None

    @staticmethod
    def _to_room_type(t: dict) -> RoomType:
        return RoomType(
            id=t["id"],
            name=t.get("name", ""),
            base_price=float(t.get("base_price") or 0),
            description=t.get("description"),
        )

    async def insert_room(self, room: Room) -> Room:
        payload = {
            "room_number": room.room_number,
            "room_type_id": room.room_type_id,
            "floor": room.floor,
            "status": room.status,
        }
        if room.id:
            payload["id"] = room.id
        return self._to_room(self._insert("rooms", payload))

    async def get_room(self, room_id: str) -> Room | None:
        rows = self._select("rooms", {"id": f"eq.{room_id}"})
        return self._to_room(rows[0]) if rows else None

    async def list_rooms(self, status: str | None = None) -> list[Room]:
        params = {"order": "room_number.asc"}
        if status is not None:
            params["status"] = f"eq.{status}"
        return [self._to_room(r) for r in self._select("rooms", params)]

    async def set_room_status(self, room_id: str, status: str) -> None:
        self._update(
            "rooms",
            {"id": f"eq.{room_id}"},
            {"status": status, "updated_at": datetime.now().astimezone().isoformat()},
        )

    @staticmethod
    def _to_room(r: dict) -> Room:
        return Room(
            id=r["id"],
            room_number=str(r.get("room_number", "")),
            room_type_id=r.get("room_type_id", ""),
            floor=r.get("floor") or 0,
            status=r.get("status") or "Disponible",
        )

    # -- reservations --------------------------------------------------------

    async def insert_reservation(self, reservation: Reservation) -> Reservation:
        payload = {
            "client_id": reservation.client_id,
            "room_id": reservation.room_id,
            "check_in_date": reservation.check_in_date.isoformat(),
            "check_out_date": reservation.check_out_date.isoformat(),
            "number_of_days": reservation.number_of_days,
            "total_price": reservation.total_price,
            "status": reservation.status,
            "notes": reservation.notes,
            "created_by": reservation.created_by,
        }
        return self._to_reservation(self._insert("reservations", payload))

    async def list_reservations(self) -> list[Reservation]:
        rows = self._select("reservations", {"order": "created_at.desc"})
        return [self._to_reservation(r) for r in rows]

    @staticmethod
    def _to_reservation(r: dict) -> Reservation:
        return Reservation(
            id=r["id"],
            client_id=r["client_id"],
            room_id=r["room_id"],
            check_in_date=date.fromisoformat(r["check_in_date"]),
            check_out_date=date.fromisoformat(r["check_out_date"]),
            number_of_days=r.get("number_of_days") or 0,
            total_price=float(r.get("total_price") or 0),
            status=r.get("status") or "active",
            notes=r.get("notes"),
            created_by=r.get("created_by") or "admin",
            created_at=_parse_dt(r.get("created_at")),
        )

    # -- notifications and message logs ---------------------------------------

    async def insert_notification(self, notification: Notification) -> Notification:
        payload = {
            "titre": notification.titre,
            "body": notification.body,
            "type": notification.type,
            "client_id": notification.client_id,
            "lu": notification.lu,
        }
        return self._to_notification(self._insert("notifications", payload))

    async def list_notifications(self) -> list[Notification]:
        rows = self._select("notifications", {"order": "date.desc"})
        return [self._to_notification(r) for r in rows]

    async def mark_notifications_read(self, notification_id: str | None = None) -> int:
        params = {"lu": "eq.false"}
        if notification_id is not None:
            params["id"] = f"eq.{notification_id}"
        return len(self._update("notifications", params, {"lu": True}))

    @staticmethod
    def _to_notification(n: dict) -> Notification:
        return Notification(
            id=n["id"],
            titre=n.get("titre", ""),
            body=n.get("body", ""),
            type=n.get("type") or "system",
            client_id=n.get("client_id"),
            lu=bool(n.get("lu")),
            date=_parse_dt(n.get("date")),
        )

    async def insert_message_log(self, log: MessageLog) -> MessageLog:
        payload = {
            "client_id": log.client_id,
            "canal": log.canal,
            "statut": log.statut,
            "category": log.category,
            "body": log.body,
            "template_id": log.template_id,
        }
        return self._to_message_log(self._insert("message_logs", payload))

    async def list_message_logs(self, limit: int = 50) -> list[MessageLog]:
        rows = self._select("message_logs", {"order": "date.desc", "limit": limit})
        return [self._to_message_log(r) for r in rows]

    @staticmethod
    def _to_message_log(m: dict) -> MessageLog:
        return MessageLog(
            id=m["id"],
            client_id=m["client_id"],
            canal=m.get("canal") or "whatsapp",
            statut=m.get("statut") or "sent",
            category=m.get("category") or "",
            body=m.get("body") or "",
            template_id=m.get("template_id"),
            date=_parse_dt(m.get("date")),
        )

    # -- message templates ---------------------------------------------------

    @staticmethod
    def _template_payload(template: MessageTemplate) -> dict:
        return {
            "name": template.name,
            "content": template.content,
            "trigger": template.trigger,
            "days_threshold": template.days_threshold,
            "is_active": template.is_active,
        }

    async def insert_template(self, template: MessageTemplate) -> MessageTemplate:
        payload = self._template_payload(template)
        if template.id:
            payload["id"] = template.id
        return self._to_template(self._insert("message_templates", payload))

    async def get_template(self, template_id: str) -> MessageTemplate | None:
        rows = self._select("message_templates", {"id": f"eq.{template_id}"})
        return self._to_template(rows[0]) if rows else None

    async def list_templates(self) -> list[MessageTemplate]:
        rows = self._select("message_templates", {"order": "created_at.desc"})
        return [self._to_template(r) for r in rows]

    async def update_template(self, template: MessageTemplate) -> None:
        self._update(
            "message_templates", {"id": f"eq.{template.id}"}, self._template_payload(template)
        )

    async def delete_template(self, template_id: str) -> None:
        self._delete("message_templates", {"id": f"eq.{template_id}"})

    @staticmethod
    def _to_template(t: dict) -> MessageTemplate:
        return MessageTemplate(
            id=t["id"],
            name=t.get("name") or "",
            content=t.get("content") or "",
            trigger=t.get("trigger") or "manuel",
            days_threshold=t.get("days_threshold") or 0,
            is_active=bool(t.get("is_active")),
            created_at=_parse_dt(t.get("created_at")),
        )

    # -- admins --------------------------------------------------------------

    async def insert_admin(self, admin: Admin) -> Admin:
        payload = {
            "name": admin.name,
            "phone_number": admin.phone_number,
            "is_active": admin.is_active,
        }
        if admin.id:
            payload["id"] = admin.id
        return self._to_admin(self._insert("admins", payload))

    async def find_active_admin(self, phone_number: str) -> Admin | None:
        rows = self._select(
            "admins", {"phone_number": f"eq.{phone_number}", "is_active": "eq.true", "limit": 1}
        )
        return self._to_admin(rows[0]) if rows else None

    async def list_admins(self) -> list[Admin]:
        return [self._to_admin(r) for r in self._select("admins", {"order": "created_at.asc"})]

    async def set_admin_active(self, admin_id: str, is_active: bool) -> None:
        self._update("admins", {"id": f"eq.{admin_id}"}, {"is_active": is_active})

    async def delete_admin(self, admin_id: str) -> None:
        self._delete("admins", {"id": f"eq.{admin_id}"})

    @staticmethod
    def _to_admin(a: dict) -> Admin:
        return Admin(
            id=a["id"],
            name=a.get("name") or "",
            phone_number=a.get("phone_number") or "",
            is_active=bool(a.get("is_active")),
            created_at=_parse_dt(a.get("created_at")),
        )
