"""
Value records shared by the chat assistant and the front desk.

All records are frozen: the store owns the data, callers hold read-only
copies per request and build new records with dataclasses.replace().
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Literal

RoomStatus = Literal["Disponible", "Occupée", "Nettoyage", "Réservée", "Maintenance"]
ROOM_STATUSES: tuple[str, ...] = ("Disponible", "Occupée", "Nettoyage", "Réservée", "Maintenance")

NotificationType = Literal[
    "client_enregistre", "doublon_detecte", "document_scanne", "bot_envoi", "system",
]

DEFAULT_CLIENT_NAME = "cher client"


@dataclass(frozen=True)
class ClientProfile:
    """A registered hotel client, as stored in the clients table."""
    id: str
    full_name: str
    whatsapp_number: str
    nom: str = ""
    postnom: str = ""
    prenom: str = ""
    whatsapp_country_code: str = "+243"
    phone_number: str | None = None
    email: str | None = None
    nationality: str | None = None
    matricule: str | None = None
    document_type: str | None = None
    commentaire: str | None = None
    total_sejours: int = 0
    total_nuits: int = 0
    fidelite_score: int = 0
    is_vip: bool = False
    is_duplicate: bool = False
    tags: tuple[str, ...] = ()
    statut: Literal["actif", "inactif"] = "actif"
    attribue_par: Literal["admin", "receptionniste"] = "admin"
    created_at: datetime | None = None

    @property
    def display_name(self) -> str:
        return self.full_name or self.prenom or self.nom or DEFAULT_CLIENT_NAME

    @property
    def has_email(self) -> bool:
        return bool(self.email)


@dataclass(frozen=True)
class RoomType:
    id: str
    name: str
    base_price: float = 0.0
    description: str | None = None


@dataclass(frozen=True)
class Room:
    id: str
    room_number: str
    room_type_id: str
    floor: int = 0
    status: RoomStatus = "Disponible"


@dataclass(frozen=True)
class Reservation:
    id: str
    client_id: str
    room_id: str
    check_in_date: date
    check_out_date: date
    number_of_days: int
    total_price: float
    status: Literal["active", "completed", "cancelled"] = "active"
    notes: str | None = None
    created_by: str = "admin"
    created_at: datetime | None = None


@dataclass(frozen=True)
class Notification:
    """Append-only record shown on the admin notifications screen."""
    id: str
    titre: str
    body: str
    type: NotificationType
    client_id: str | None = None
    lu: bool = False
    date: datetime | None = None


@dataclass(frozen=True)
class MessageLog:
    """Append-only record of one outbound message attempt."""
    id: str
    client_id: str
    canal: Literal["whatsapp", "email", "console"]
    statut: Literal["sent", "delivered", "failed"]
    category: str = ""
    body: str = ""
    template_id: str | None = None
    date: datetime | None = None


TemplateTrigger = Literal["post_checkout", "inactif", "anniversaire", "manuel"]


@dataclass(frozen=True)
class MessageTemplate:
    """Staff-written outbound message, kept in the message_templates table."""
    id: str
    name: str
    content: str
    trigger: TemplateTrigger = "manuel"
    days_threshold: int = 30
    is_active: bool = True
    created_at: datetime | None = None


@dataclass(frozen=True)
class Admin:
    """A staff member allowed into the admin screens."""
    id: str
    name: str
    phone_number: str  # international, e.g. "+243976938182"
    is_active: bool = True
    created_at: datetime | None = None


@dataclass(frozen=True)
class ChatMessage:
    """One line of a chat transcript, kept only in the session's memory."""
    id: str
    text: str
    sender: Literal["user", "bot"]
    timestamp: datetime = field(default_factory=datetime.now)
