"""
SQLite adapter for FrontDeskStore.

Use ":memory:" for tests, a file path for production.
"""

import json
import sqlite3
import uuid
from datetime import date, datetime, timezone

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

_SCHEMA = """
CREATE TABLE IF NOT EXISTS clients (
    id              TEXT PRIMARY KEY,
    full_name       TEXT NOT NULL,
    nom             TEXT NOT NULL DEFAULT '',
    postnom         TEXT NOT NULL DEFAULT '',
    prenom          TEXT NOT NULL DEFAULT '',
    whatsapp_number TEXT NOT NULL,
    whatsapp_country_code TEXT NOT NULL DEFAULT '+243',
    phone_number    TEXT,
    email           TEXT,
    nationality     TEXT,
    matricule       TEXT,
    document_type   TEXT,
    commentaire     TEXT,
    total_sejours   INTEGER NOT NULL DEFAULT 0,
    total_nuits     INTEGER NOT NULL DEFAULT 0,
    fidelite_score  INTEGER NOT NULL DEFAULT 0,
    is_vip          INTEGER NOT NULL DEFAULT 0,
    is_duplicate    INTEGER NOT NULL DEFAULT 0,
    tags            TEXT NOT NULL DEFAULT '[]',
    statut          TEXT NOT NULL DEFAULT 'actif',
    attribue_par    TEXT NOT NULL DEFAULT 'admin',
    created_at      TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS room_types (
    id          TEXT PRIMARY KEY,
    name        TEXT NOT NULL,
    description TEXT,
    base_price  REAL NOT NULL DEFAULT 0
);

CREATE TABLE IF NOT EXISTS rooms (
    id           TEXT PRIMARY KEY,
    room_number  TEXT NOT NULL,
    room_type_id TEXT NOT NULL REFERENCES room_types(id),
    floor        INTEGER NOT NULL DEFAULT 0,
    status       TEXT NOT NULL DEFAULT 'Disponible',
    updated_at   TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS reservations (
    id             TEXT PRIMARY KEY,
    client_id      TEXT NOT NULL REFERENCES clients(id),
    room_id        TEXT NOT NULL REFERENCES rooms(id),
    check_in_date  TEXT NOT NULL,
    check_out_date TEXT NOT NULL,
    number_of_days INTEGER NOT NULL,
    total_price    REAL NOT NULL,
    status         TEXT NOT NULL DEFAULT 'active',
    notes          TEXT,
    created_by     TEXT NOT NULL DEFAULT 'admin',
    created_at     TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS notifications (
    id        TEXT PRIMARY KEY,
    titre     TEXT NOT NULL,
    body      TEXT NOT NULL,
    type      TEXT NOT NULL,
    client_id TEXT,
    lu        INTEGER NOT NULL DEFAULT 0,
    date      TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS message_logs (
    id        TEXT PRIMARY KEY,
    client_id TEXT NOT NULL,
    canal     TEXT NOT NULL,
    statut    TEXT NOT NULL,
    category  TEXT NOT NULL DEFAULT '',
    body      TEXT NOT NULL DEFAULT '',
    template_id TEXT,
    date      TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS message_templates (
    id             TEXT PRIMARY KEY,
    name           TEXT NOT NULL,
    content        TEXT NOT NULL,
    trigger        TEXT NOT NULL DEFAULT 'manuel',
    days_threshold INTEGER NOT NULL DEFAULT 30,
    is_active      INTEGER NOT NULL DEFAULT 1,
    created_at     TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS admins (
    id           TEXT PRIMARY KEY,
    name         TEXT NOT NULL,
    phone_number TEXT NOT NULL UNIQUE,
    is_active    INTEGER NOT NULL DEFAULT 1,
    created_at   TEXT NOT NULL
);
"""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _new_id() -> str:
    return str(uuid.uuid4())


def _parse_dt(s: str | None) -> datetime | None:
    return datetime.fromisoformat(s) if s else None


def _iso(dt: datetime | None) -> str:
    return dt.isoformat() if dt else _now()


def _lower(value: str | None) -> str | None:
    # SQLite's lower() only folds ASCII; accented names need Python's
    return value.lower() if value is not None else None


class SqliteFrontDeskStore(FrontDeskStore):

    def __init__(self, db_path: str = "frontdesk.db"):
        self._conn = sqlite3.connect(db_path)
        self._conn.row_factory = sqlite3.Row
        self._conn.create_function("py_lower", 1, _lower, deterministic=True)
        self._conn.executescript(_SCHEMA)

    # -- clients -------------------------------------------------------------

    async def find_duplicate(self, whatsapp_number: str, nom: str) -> ClientProfile | None:
        needle = nom.strip().lower()
        row = self._conn.execute(
            "SELECT * FROM clients"
            " WHERE (? != '' AND whatsapp_number = ?)"
            "    OR (? != '' AND instr(py_lower(full_name), ?) > 0)"
            " ORDER BY rowid LIMIT 1",
            (whatsapp_number, whatsapp_number, needle, needle),
        ).fetchone()
        return self._row_to_client(row) if row else None

    async def find_by_phone(self, phone: str, country_code: str = "") -> ClientProfile | None:
        prefixed = f"{country_code}{phone}"
        row = self._conn.execute(
            "SELECT * FROM clients"
            " WHERE whatsapp_number IN (?, ?) OR phone_number IN (?, ?)"
            " ORDER BY rowid LIMIT 1",
            (phone, prefixed, phone, prefixed),
        ).fetchone()
        return self._row_to_client(row) if row else None

    async def get_client(self, client_id: str) -> ClientProfile | None:
        row = self._conn.execute("SELECT * FROM clients WHERE id = ?", (client_id,)).fetchone()
        return self._row_to_client(row) if row else None

    async def list_clients(self) -> list[ClientProfile]:
        rows = self._conn.execute("SELECT * FROM clients ORDER BY full_name").fetchall()
        return [self._row_to_client(r) for r in rows]

    async def insert_client(self, client: ClientProfile) -> ClientProfile:
        client_id = client.id or _new_id()
        self._conn.execute(
            "INSERT INTO clients"
            " (id, full_name, nom, postnom, prenom, whatsapp_number, whatsapp_country_code,"
            "  phone_number, email, nationality, matricule, document_type, commentaire,"
            "  total_sejours, total_nuits, fidelite_score, is_vip, is_duplicate, tags,"
            "  statut, attribue_par, created_at)"
            " VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (client_id, client.full_name, client.nom, client.postnom, client.prenom,
             client.whatsapp_number, client.whatsapp_country_code, client.phone_number,
             client.email, client.nationality, client.matricule, client.document_type,
             client.commentaire, client.total_sejours, client.total_nuits,
             client.fidelite_score, int(client.is_vip), int(client.is_duplicate),
             json.dumps(list(client.tags)), client.statut, client.attribue_par,
             _iso(client.created_at)),
        )
        self._conn.commit()
        stored = await self.get_client(client_id)
        assert stored is not None
        return stored

    async def update_client_stats(
        self, client_id: str, total_sejours: int, total_nuits: int, fidelite_score: int
    ) -> None:
        self._conn.execute(
            "UPDATE clients SET total_sejours = ?, total_nuits = ?, fidelite_score = ?"
            " WHERE id = ?",
            (total_sejours, total_nuits, fidelite_score, client_id),
        )
        self._conn.commit()

    @staticmethod
    def _row_to_client(row) -> ClientProfile:
        return ClientProfile(
            id=row["id"],
            full_name=row["full_name"],
            nom=row["nom"],
            postnom=row["postnom"],
            prenom=row["prenom"],
            whatsapp_number=row["whatsapp_number"],
            whatsapp_country_code=row["whatsapp_country_code"],
            phone_number=row["phone_number"],
            email=row["email"],
            nationality=row["nationality"],
            matricule=row["matricule"],
            document_type=row["document_type"],
            commentaire=row["commentaire"],
            total_sejours=row["total_sejours"],
            total_nuits=row["total_nuits"],
            fidelite_score=row["fidelite_score"],
            is_vip=bool(row["is_vip"]),
            is_duplicate=bool(row["is_duplicate"]),
            tags=tuple(json.loads(row["tags"])),
            statut=row["statut"],
            attribue_par=row["attribue_par"],
            created_at=_parse_dt(row["created_at"]),
        )

    # -- rooms ---------------------------------------------------------------

    async def insert_room_type(self, room_type: RoomType) -> RoomType:
        room_type_id = room_type.id or _new_id()
        self._conn.execute(
            "INSERT INTO room_types (id, name, description, base_price) VALUES (?, ?, ?, ?)",
            (room_type_id, room_type.name, room_type.description, room_type.base_price),
        )
        self._conn.commit()
        return RoomType(
            id=room_type_id,
            name=room_type.name,
            base_price=room_type.base_price,
            description=room_type.description,
        )

    async def get_room_type(self, room_type_id: str) -> RoomType | None:
        row = self._conn.execute(
            "SELECT * FROM room_types WHERE id = ?", (room_type_id,)
        ).fetchone()
        if not row:
            return None
        return RoomType(
            id=row["id"],
            name=row["name"],
            base_price=row["base_price"],
            description=row["description"],
        )

    async def insert_room(self, room: Room) -> Room:
        room_id = room.id or _new_id()
        self._conn.execute(
            "INSERT INTO rooms (id, room_number, room_type_id, floor, status, updated_at)"
            " VALUES (?, ?, ?, ?, ?, ?)",
            (room_id, room.room_number, room.room_type_id, room.floor, room.status, _now()),
        )
        self._conn.commit()
        return Room(
            id=room_id,
            room_number=room.room_number,
            room_type_id=room.room_type_id,
            floor=room.floor,
            status=room.status,
        )

    async def get_room(self, room_id: str) -> Room | None:
        row = self._conn.execute("SELECT * FROM rooms WHERE id = ?", (room_id,)).fetchone()
        return self._row_to_room(row) if row else None

    async def list_rooms(self, status: str | None = None) -> list[Room]:
        if status is None:
            rows = self._conn.execute("SELECT * FROM rooms ORDER BY room_number").fetchall()
        else:
            rows = self._conn.execute(
                "SELECT * FROM rooms WHERE status = ? ORDER BY room_number", (status,)
            ).fetchall()
        return [self._row_to_room(r) for r in rows]

    async def set_room_status(self, room_id: str, status: str) -> None:
        self._conn.execute(
            "UPDATE rooms SET status = ?, updated_at = ? WHERE id = ?",
            (status, _now(), room_id),
        )
        self._conn.commit()

    @staticmethod
    def _row_to_room(row) -> Room:
        return Room(
            id=row["id"],
            room_number=row["room_number"],
            room_type_id=row["room_type_id"],
            floor=row["floor"],
            status=row["status"],
        )

    # -- reservations --------------------------------------------------------

    async def insert_reservation(self, reservation: Reservation) -> Reservation:
        reservation_id = reservation.id or _new_id()
        created_at = _iso(reservation.created_at)
        self._conn.execute(
            "INSERT INTO reservations"
            " (id, client_id, room_id, check_in_date, check_out_date, number_of_days,"
            "  total_price, status, notes, created_by, created_at)"
            " VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (reservation_id, reservation.client_id, reservation.room_id,
             reservation.check_in_date.isoformat(), reservation.check_out_date.isoformat(),
             reservation.number_of_days, reservation.total_price, reservation.status,
             reservation.notes, reservation.created_by, created_at),
        )
        self._conn.commit()
        row = self._conn.execute(
            "SELECT * FROM reservations WHERE id = ?", (reservation_id,)
        ).fetchone()
        return self._row_to_reservation(row)

    async def list_reservations(self) -> list[Reservation]:
        rows = self._conn.execute(
            "SELECT * FROM reservations ORDER BY created_at DESC, rowid DESC"
        ).fetchall()
        return [self._row_to_reservation(r) for r in rows]

    @staticmethod
    def _row_to_reservation(row) -> Reservation:
        return Reservation(
            id=row["id"],
            client_id=row["client_id"],
            room_id=row["room_id"],
            check_in_date=date.fromisoformat(row["check_in_date"]),
            check_out_date=date.fromisoformat(row["check_out_date"]),
            number_of_days=row["number_of_days"],
            total_price=row["total_price"],
            status=row["status"],
            notes=row["notes"],
            created_by=row["created_by"],
            created_at=_parse_dt(row["created_at"]),
        )

    # -- notifications and message logs ---------------------------------------

    async def insert_notification(self, notification: Notification) -> Notification:
        notification_id = notification.id or _new_id()
        self._conn.execute(
            "INSERT INTO notifications (id, titre, body, type, client_id, lu, date)"
            " VALUES (?, ?, ?, ?, ?, ?, ?)",
            (notification_id, notification.titre, notification.body, notification.type,
             notification.client_id, int(notification.lu), _iso(notification.date)),
        )
        self._conn.commit()
        row = self._conn.execute(
            "SELECT * FROM notifications WHERE id = ?", (notification_id,)
        ).fetchone()
        return self._row_to_notification(row)

    async def list_notifications(self) -> list[Notification]:
        rows = self._conn.execute(
            "SELECT * FROM notifications ORDER BY date DESC, rowid DESC"
        ).fetchall()
        return [self._row_to_notification(r) for r in rows]

    async def mark_notifications_read(self, notification_id: str | None = None) -> int:
        if notification_id is None:
            cur = self._conn.execute("UPDATE notifications SET lu = 1 WHERE lu = 0")
        else:
            cur = self._conn.execute(
                "UPDATE notifications SET lu = 1 WHERE id = ? AND lu = 0", (notification_id,)
            )
        self._conn.commit()
        return cur.rowcount

    @staticmethod
    def _row_to_notification(row) -> Notification:
        return Notification(
            id=row["id"],
            titre=row["titre"],
            body=row["body"],
            type=row["type"],
            client_id=row["client_id"],
            lu=bool(row["lu"]),
            date=_parse_dt(row["date"]),
        )

    async def insert_message_log(self, log: MessageLog) -> MessageLog:
        log_id = log.id or _new_id()
        self._conn.execute(
            "INSERT INTO message_logs"
            " (id, client_id, canal, statut, category, body, template_id, date)"
            " VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
            (log_id, log.client_id, log.canal, log.statut, log.category, log.body,
             log.template_id, _iso(log.date)),
        )
        self._conn.commit()
        row = self._conn.execute("SELECT * FROM message_logs WHERE id = ?", (log_id,)).fetchone()
        return self._row_to_message_log(row)

    async def list_message_logs(self, limit: int = 50) -> list[MessageLog]:
        rows = self._conn.execute(
            "SELECT * FROM message_logs ORDER BY date DESC, rowid DESC LIMIT ?", (limit,)
        ).fetchall()
        return [self._row_to_message_log(r) for r in rows]

    @staticmethod
    def _row_to_message_log(row) -> MessageLog:
        return MessageLog(
            id=row["id"],
            client_id=row["client_id"],
            canal=row["canal"],
            statut=row["statut"],
            category=row["category"],
            body=row["body"],
            template_id=row["template_id"],
            date=_parse_dt(row["date"]),
        )

    # -- message templates ---------------------------------------------------

    async def insert_template(self, template: MessageTemplate) -> MessageTemplate:
        template_id = template.id or _new_id()
        self._conn.execute(
            "INSERT INTO message_templates"
            " (id, name, content, trigger, days_threshold, is_active, created_at)"
            " VALUES (?, ?, ?, ?, ?, ?, ?)",
            (template_id, template.name, template.content, template.trigger,
             template.days_threshold, int(template.is_active), _iso(template.created_at)),
        )
        self._conn.commit()
        stored = await self.get_template(template_id)
        assert stored is not None
        return stored

    async def get_template(self, template_id: str) -> MessageTemplate | None:
        row = self._conn.execute(
            "SELECT * FROM message_templates WHERE id = ?", (template_id,)
        ).fetchone()
        return self._row_to_template(row) if row else None

    async def list_templates(self) -> list[MessageTemplate]:
        rows = self._conn.execute(
            "SELECT * FROM message_templates ORDER BY created_at DESC, rowid DESC"
        ).fetchall()
        return [self._row_to_template(r) for r in rows]

    async def update_template(self, template: MessageTemplate) -> None:
        self._conn.execute(
            "UPDATE message_templates"
            " SET name = ?, content = ?, trigger = ?, days_threshold = ?, is_active = ?"
            " WHERE id = ?",
            (template.name, template.content, template.trigger, template.days_threshold,
             int(template.is_active), template.id),
        )
        self._conn.commit()

    async def delete_template(self, template_id: str) -> None:
        self._conn.execute("DELETE FROM message_templates WHERE id = ?", (template_id,))
        self._conn.commit()

    @staticmethod
    def _row_to_template(row) -> MessageTemplate:
        return MessageTemplate(
            id=row["id"],
            name=row["name"],
            content=row["content"],
            trigger=row["trigger"],
            days_threshold=row["days_threshold"],
            is_active=bool(row["is_active"]),
            created_at=_parse_dt(row["created_at"]),
        )

    # -- admins --------------------------------------------------------------

    async def insert_admin(self, admin: Admin) -> Admin:
        admin_id = admin.id or _new_id()
        self._conn.execute(
            "INSERT INTO admins (id, name, phone_number, is_active, created_at)"
            " VALUES (?, ?, ?, ?, ?)",
            (admin_id, admin.name, admin.phone_number, int(admin.is_active),
             _iso(admin.created_at)),
        )
        self._conn.commit()
        row = self._conn.execute("SELECT * FROM admins WHERE id = ?", (admin_id,)).fetchone()
        return self._row_to_admin(row)

    async def find_active_admin(self, phone_number: str) -> Admin | None:
        row = self._conn.execute(
            "SELECT * FROM admins WHERE phone_number = ? AND is_active = 1", (phone_number,)
        ).fetchone()
        return self._row_to_admin(row) if row else None

    async def list_admins(self) -> list[Admin]:
        rows = self._conn.execute("SELECT * FROM admins ORDER BY created_at, rowid").fetchall()
        return [self._row_to_admin(r) for r in rows]

    async def set_admin_active(self, admin_id: str, is_active: bool) -> None:
        self._conn.execute(
            "UPDATE admins SET is_active = ? WHERE id = ?", (int(is_active), admin_id)
        )
        self._conn.commit()

    async def delete_admin(self, admin_id: str) -> None:
        self._conn.execute("DELETE FROM admins WHERE id = ?", (admin_id,))
        self._conn.commit()

    @staticmethod
    def _row_to_admin(row) -> Admin:
        return Admin(
            id=row["id"],
            name=row["name"],
            phone_number=row["phone_number"],
            is_active=bool(row["is_active"]),
            created_at=_parse_dt(row["created_at"]),
        )
