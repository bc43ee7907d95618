"""
Front desk workflows: client registration, room board, history, notifications,
dashboard counts and admin access.

Registration flow:
  1. Code: validate the form (WhatsApp number, nights, room availability)
  2. Store: look for an existing client (same WhatsApp number, or surname
     contained in an existing full name)
  3. Code: carry the returning client's counters forward and bump the score
  4. Store: insert client, update the existing record, insert reservation,
     mark the room occupied, append notifications

The store does the I/O; everything decided here is plain code.

Admin login needs both an allow-listed number (HotelSettings.admin_numbers)
and an active row in the admins table; if the table cannot be read, the
allow-list alone decides.
"""

import logging
import random
import re
import string
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Literal

from src.domain.loyalty import (
    LOYAL_THRESHOLD,
    NEW_CLIENT_SCORE,
    VIP_THRESHOLD,
    Tier,
    loyalty_score,
    loyalty_tier,
    repeat_visit_score,
)
from src.domain.records import (
    ROOM_STATUSES,
    Admin,
    ClientProfile,
    Notification,
    Reservation,
    Room,
)
from src.domain.store import FrontDeskStore
from src.settings import HotelSettings

log = logging.getLogger(__name__)

WHATSAPP_MIN_DIGITS = 6
WHATSAPP_MAX_DIGITS = 15

ROOM_AVAILABLE = "Disponible"
ROOM_OCCUPIED = "Occupée"


class RegistrationError(Exception):
    """The registration form is invalid; the text is shown to the receptionist."""


class AdminAuthError(Exception):
    """The number may not open the admin screens; the text is shown at login."""


def normalize_phone(number: str) -> str:
    return re.sub(r"\D", "", number or "")


def is_valid_whatsapp(number: str) -> bool:
    return WHATSAPP_MIN_DIGITS <= len(normalize_phone(number)) <= WHATSAPP_MAX_DIGITS


def normalize_admin_phone(value: str) -> str:
    """Local or international input to "+243..." form, e.g. "0976 938 182" -> "+243976938182"."""
    digits = normalize_phone(value)
    if digits.startswith("243"):
        return "+" + digits
    if digits.startswith("0"):
        return "+243" + digits[1:]
    return value.strip()


def generate_matricule(rng: random.Random, today: date) -> str:
    """Client file number, e.g. HT2604-K3ZQ."""
    suffix = "".join(rng.choice(string.ascii_uppercase + string.digits) for _ in range(4))
    return f"HT{today:%y%m}-{suffix}"


@dataclass
class RegistrationForm:
    nom: str
    whatsapp_number: str
    room_id: str
    number_of_days: int = 1
    postnom: str = ""
    prenom: str = ""
    whatsapp_country_code: str = "+243"
    phone_number: str | None = None
    email: str | None = None
    nationality: str | None = None
    document_type: str | None = None
    commentaire: str | None = None
    registered_by: Literal["admin", "receptionniste"] = "admin"

    @property
    def full_name(self) -> str:
        return " ".join(p.strip() for p in (self.nom, self.postnom, self.prenom) if p.strip())


@dataclass
class RegistrationResult:
    client: ClientProfile
    reservation: Reservation
    room: Room
    duplicate_of: ClientProfile | None = None

    @property
    def is_duplicate(self) -> bool:
        return self.duplicate_of is not None


@dataclass
class ScoredClient:
    client: ClientProfile
    score: int
    tier: Tier


@dataclass
class DashboardStats:
    total_clients: int
    total_rooms: int
    available_rooms: int
    occupied_rooms: int
    active_reservations: int
    today_check_ins: int


class FrontDesk:

    def __init__(
        self,
        store: FrontDeskStore,
        rng: random.Random | None = None,
        settings: HotelSettings | None = None,
    ):
        self._store = store
        self._rng = rng or random.Random()
        self._settings = settings or HotelSettings()

    # -- registration --------------------------------------------------------

    async def register_client(
        self, form: RegistrationForm, today: date | None = None
    ) -> RegistrationResult:
        today = today or date.today()
        whatsapp = normalize_phone(form.whatsapp_number)

        if not is_valid_whatsapp(whatsapp):
            raise RegistrationError("Le numéro WhatsApp n'est pas valide")
        if not form.room_id:
            raise RegistrationError("Veuillez sélectionner une chambre")
        if form.number_of_days < 1:
            raise RegistrationError("Le nombre de nuits doit être au moins 1")

        room = await self._store.get_room(form.room_id)
        if room is None or room.status != ROOM_AVAILABLE:
            raise RegistrationError("Cette chambre n'est pas disponible")

        existing = await self._store.find_duplicate(whatsapp, form.nom.strip())
        if existing is not None:
            total_sejours = max(existing.total_sejours, 0) + 1
            total_nuits = max(existing.total_nuits, 0) + form.number_of_days
            score = repeat_visit_score(existing.fidelite_score)
        else:
            total_sejours, total_nuits, score = 1, form.number_of_days, NEW_CLIENT_SCORE

        full_name = form.full_name
        client = await self._store.insert_client(
            ClientProfile(
                id="",
                full_name=full_name,
                nom=form.nom.strip(),
                postnom=form.postnom.strip(),
                prenom=form.prenom.strip(),
                whatsapp_number=whatsapp,
                whatsapp_country_code=form.whatsapp_country_code,
                phone_number=form.phone_number or None,
                email=form.email or None,
                nationality=form.nationality or None,
                matricule=generate_matricule(self._rng, today),
                document_type=form.document_type or None,
                commentaire=form.commentaire or None,
                total_sejours=total_sejours,
                total_nuits=total_nuits,
                fidelite_score=score,
                is_duplicate=existing is not None,
                attribue_par=form.registered_by,
            )
        )
        if existing is not None:
            await self._store.update_client_stats(existing.id, total_sejours, total_nuits, score)

        room_type = await self._store.get_room_type(room.room_type_id)
        base_price = room_type.base_price if room_type else 0.0
        reservation = await self._store.insert_reservation(
            Reservation(
                id="",
                client_id=client.id,
                room_id=room.id,
                check_in_date=today,
                check_out_date=today + timedelta(days=form.number_of_days),
                number_of_days=form.number_of_days,
                total_price=base_price * form.number_of_days,
                notes=form.commentaire or None,
                created_by=form.registered_by,
            )
        )

        await self._store.set_room_status(room.id, ROOM_OCCUPIED)

        if existing is not None:
            await self._notify(
                "Client fidèle détecté",
                f"{full_name} est un client récurrent. Fidélité: {score}%",
                "doublon_detecte",
                client.id,
            )
        else:
            await self._notify(
                "Nouveau client enregistré",
                f"{full_name} a été enregistré dans la chambre {room.room_number}",
                "client_enregistre",
                client.id,
            )
        if form.document_type:
            await self._notify(
                "Document scanné",
                f"Document {form.document_type} scanné pour {full_name}",
                "document_scanne",
                client.id,
            )

        log.info(
            "client=%s room=%s nights=%d duplicate=%s score=%d",
            client.id, room.room_number, form.number_of_days, existing is not None, score,
        )
        return RegistrationResult(
            client=client,
            reservation=reservation,
            room=room,
            duplicate_of=existing,
        )

    async def _notify(self, titre: str, body: str, kind: str, client_id: str) -> None:
        await self._store.insert_notification(
            Notification(id="", titre=titre, body=body, type=kind, client_id=client_id)
        )

    # -- clients -------------------------------------------------------------

    async def clients_with_scores(
        self,
        search: str | None = None,
        tag: str | None = None,
        sort_by: Literal["loyalty", "name", "recent"] = "loyalty",
    ) -> list[ScoredClient]:
        """Clients with a freshly computed loyalty score and tier."""
        scored = []
        for c in await self._store.list_clients():
            score = loyalty_score(c.total_sejours, c.total_nuits, c.has_email)
            scored.append(ScoredClient(client=c, score=score, tier=loyalty_tier(score)))

        if search:
            query = search.lower()
            scored = [
                s for s in scored
                if query in s.client.full_name.lower()
                or query in (s.client.phone_number or "")
                or query in s.client.whatsapp_number
                or query in (s.client.email or "").lower()
            ]
        if tag == "vip":
            scored = [s for s in scored if s.score >= VIP_THRESHOLD]
        elif tag == "fidele":
            scored = [s for s in scored if s.score >= LOYAL_THRESHOLD]

        if sort_by == "loyalty":
            scored.sort(key=lambda s: s.score, reverse=True)
        elif sort_by == "name":
            scored.sort(key=lambda s: s.client.full_name.lower())
        else:
            scored.sort(
                key=lambda s: s.client.created_at.timestamp() if s.client.created_at else 0.0,
                reverse=True,
            )
        return scored

    async def dashboard_stats(self, today: date | None = None) -> DashboardStats:
        """Headline counts for the admin home screen."""
        today = today or date.today()
        rooms = await self._store.list_rooms()
        reservations = await self._store.list_reservations()
        return DashboardStats(
            total_clients=len(await self._store.list_clients()),
            total_rooms=len(rooms),
            available_rooms=sum(r.status == ROOM_AVAILABLE for r in rooms),
            occupied_rooms=sum(r.status == ROOM_OCCUPIED for r in rooms),
            active_reservations=sum(r.status == "active" for r in reservations),
            today_check_ins=sum(r.check_in_date == today for r in reservations),
        )

    # -- rooms ---------------------------------------------------------------

    async def set_room_status(self, room_id: str, status: str) -> None:
        if status not in ROOM_STATUSES:
            raise ValueError(f"Unknown room status: {status!r}")
        await self._store.set_room_status(room_id, status)

    async def room_board(self) -> dict[str, int]:
        """Room count per status, every status present."""
        board = {status: 0 for status in ROOM_STATUSES}
        for room in await self._store.list_rooms():
            board[room.status] = board.get(room.status, 0) + 1
        return board

    # -- history -------------------------------------------------------------

    async def reservation_history(
        self, search: str | None = None, status: str | None = None
    ) -> list[tuple[Reservation, ClientProfile | None, Room | None]]:
        """Reservations newest first, joined with their client and room."""
        rows = []
        for res in await self._store.list_reservations():
            if status and res.status != status:
                continue
            client = await self._store.get_client(res.client_id)
            room = await self._store.get_room(res.room_id)
            if search:
                query = search.lower()
                name = client.full_name.lower() if client else ""
                number = room.room_number if room else ""
                if query not in name and query not in number:
                    continue
            rows.append((res, client, room))
        return rows

    # -- notifications -------------------------------------------------------

    async def notifications(self, unread_only: bool = False) -> list[Notification]:
        items = await self._store.list_notifications()
        return [n for n in items if not n.lu] if unread_only else items

    async def mark_read(self, notification_id: str | None = None) -> int:
        return await self._store.mark_notifications_read(notification_id)

    # -- admins --------------------------------------------------------------

    async def authenticate_admin(self, phone: str) -> Admin:
        """
        Admin login: the number must be on the allow-list AND belong to an
        active admin.  When the store cannot be reached the allow-list alone
        decides.
        """
        number = normalize_admin_phone(phone)
        if number not in self._settings.admin_numbers:
            log.info("admin login refused: number not allowed")
            raise AdminAuthError("Numéro non autorisé. Accès refusé.")

        try:
            admin = await self._store.find_active_admin(number)
        except Exception as exc:
            log.warning("admin lookup failed, allow-list only: %s", exc)
            return Admin(id="", name="Administrateur", phone_number=number)

        if admin is None:
            log.info("admin login refused: no active admin for allowed number")
            raise AdminAuthError("Numéro non autorisé. Accès refusé.")
        log.info("admin login: %s", admin.id)
        return admin

    async def add_admin(self, name: str, phone: str) -> Admin:
        if not name.strip() or not phone.strip():
            raise ValueError("name and phone are required")
        return await self._store.insert_admin(
            Admin(id="", name=name.strip(), phone_number=normalize_admin_phone(phone))
        )

    async def admins(self) -> list[Admin]:
        return await self._store.list_admins()

    async def toggle_admin(self, admin: Admin) -> None:
        await self._store.set_admin_active(admin.id, not admin.is_active)

    async def remove_admin(self, admin_id: str) -> None:
        await self._store.delete_admin(admin_id)
