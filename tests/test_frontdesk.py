"""
Front desk workflow tests, against the in-memory store.

No network, no credentials.
"""

import random
import re
from datetime import date

import pytest

from src.adapters.memory_store import InMemoryFrontDeskStore
from src.adapters.sqlite_store import SqliteFrontDeskStore
from src.domain.records import Admin, ClientProfile, Reservation, Room, RoomType
from src.frontdesk import (
    AdminAuthError,
    DashboardStats,
    FrontDesk,
    RegistrationError,
    RegistrationForm,
    generate_matricule,
    is_valid_whatsapp,
    normalize_admin_phone,
    normalize_phone,
)
from src.settings import HotelSettings

TODAY = date(2026, 4, 1)


@pytest.fixture
def store():
    return InMemoryFrontDeskStore()


@pytest.fixture
def desk(store):
    return FrontDesk(store, rng=random.Random(42))


async def _rooms(store, *numbers: str, price: float = 40.0) -> list[Room]:
    rt = await store.insert_room_type(RoomType(id="", name="Standard", base_price=price))
    return [
        await store.insert_room(Room(id="", room_number=n, room_type_id=rt.id, floor=1))
        for n in numbers
    ]


def _form(room: Room, **kw) -> RegistrationForm:
    defaults = dict(
        nom="Mukendi",
        postnom="Kalala",
        prenom="Élodie",
        whatsapp_number="970 000 001",
        room_id=room.id,
        number_of_days=3,
    )
    defaults.update(kw)
    return RegistrationForm(**defaults)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def test_normalize_phone():
    assert normalize_phone("+243 (970) 000-001") == "243970000001"
    assert normalize_phone("") == ""


@pytest.mark.parametrize("number, valid", [
    ("970000001", True),
    ("123456", True),
    ("12345", False),
    ("1234567890123456", False),
    ("abc", False),
])
def test_is_valid_whatsapp(number, valid):
    assert is_valid_whatsapp(number) is valid


def test_generate_matricule_format():
    matricule = generate_matricule(random.Random(1), TODAY)
    assert re.fullmatch(r"HT2604-[A-Z0-9]{4}", matricule)


def test_form_full_name_skips_empty_parts():
    form = RegistrationForm(nom=" Mukendi ", postnom="", prenom="Élodie",
                            whatsapp_number="970000001", room_id="r1")
    assert form.full_name == "Mukendi Élodie"


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_register_new_client(store, desk):
    (room,) = await _rooms(store, "101")
    result = await desk.register_client(_form(room), today=TODAY)

    assert not result.is_duplicate
    client = result.client
    assert client.full_name == "Mukendi Kalala Élodie"
    assert client.whatsapp_number == "970000001"
    assert (client.total_sejours, client.total_nuits, client.fidelite_score) == (1, 3, 10)
    assert client.matricule.startswith("HT2604-")

    res = result.reservation
    assert res.check_in_date == TODAY
    assert res.check_out_date == date(2026, 4, 4)
    assert res.total_price == 120.0
    assert (await store.get_room(room.id)).status == "Occupée"

    notes = await store.list_notifications()
    assert [n.type for n in notes] == ["client_enregistre"]
    assert "101" in notes[0].body


@pytest.mark.asyncio
async def test_duplicate_by_whatsapp_updates_existing_record(store, desk):
    first_room, second_room = await _rooms(store, "101", "102")
    first = await desk.register_client(_form(first_room, number_of_days=3), today=TODAY)

    second = await desk.register_client(
        _form(second_room, nom="Autre", prenom="", postnom="", number_of_days=2), today=TODAY
    )

    assert second.is_duplicate
    assert second.duplicate_of.id == first.client.id
    assert second.client.is_duplicate
    assert second.client.id != first.client.id

    existing = await store.get_client(first.client.id)
    assert existing.total_sejours == 2
    assert existing.total_nuits == 5
    assert existing.fidelite_score == 20
    assert (second.client.total_sejours, second.client.total_nuits) == (2, 5)

    latest = (await store.list_notifications())[0]
    assert latest.type == "doublon_detecte"
    assert "20%" in latest.body


@pytest.mark.asyncio
async def test_duplicate_by_surname(store, desk):
    first_room, second_room = await _rooms(store, "101", "102")
    await desk.register_client(_form(first_room), today=TODAY)
    second = await desk.register_client(
        _form(second_room, nom="mukendi", whatsapp_number="990000009"), today=TODAY
    )
    assert second.is_duplicate


@pytest.mark.asyncio
async def test_duplicate_by_surname_ignores_surrounding_spaces(store, desk):
    first_room, second_room = await _rooms(store, "101", "102")
    await desk.register_client(_form(first_room), today=TODAY)
    second = await desk.register_client(
        _form(second_room, nom="  Mukendi  ", whatsapp_number="990000009"), today=TODAY
    )
    assert second.is_duplicate
    assert second.client.nom == "Mukendi"


@pytest.mark.asyncio
async def test_third_visit_keeps_accumulating(store, desk):
    rooms = await _rooms(store, "101", "102", "103")
    for room in rooms:
        await desk.register_client(_form(room, number_of_days=1), today=TODAY)

    clients = await store.list_clients()
    (first,) = [c for c in clients if not c.is_duplicate]
    assert first.total_sejours == 3
    assert first.total_nuits == 3
    assert first.fidelite_score == 30
    assert sum(c.is_duplicate for c in clients) == 2


@pytest.mark.asyncio
async def test_document_type_adds_notification(store, desk):
    (room,) = await _rooms(store, "101")
    await desk.register_client(_form(room, document_type="Passeport"), today=TODAY)
    types = [n.type for n in await store.list_notifications()]
    assert types == ["document_scanne", "client_enregistre"]


@pytest.mark.asyncio
@pytest.mark.parametrize("overrides, message", [
    ({"whatsapp_number": "123"}, "WhatsApp"),
    ({"number_of_days": 0}, "nuits"),
    ({"room_id": ""}, "chambre"),
])
async def test_invalid_form_rejected(store, desk, overrides, message):
    (room,) = await _rooms(store, "101")
    with pytest.raises(RegistrationError, match=message):
        await desk.register_client(_form(room, **overrides), today=TODAY)
    assert await store.list_clients() == []


@pytest.mark.asyncio
async def test_occupied_room_rejected(store, desk):
    (room,) = await _rooms(store, "101")
    await desk.register_client(_form(room), today=TODAY)
    with pytest.raises(RegistrationError, match="pas disponible"):
        await desk.register_client(_form(room, whatsapp_number="990000009"), today=TODAY)


@pytest.mark.asyncio
async def test_registration_against_sqlite():
    store = SqliteFrontDeskStore(":memory:")
    desk = FrontDesk(store, rng=random.Random(0))
    first_room, second_room = await _rooms(store, "201", "202")
    first = await desk.register_client(_form(first_room), today=TODAY)
    await desk.register_client(_form(second_room, number_of_days=4), today=TODAY)

    existing = await store.get_client(first.client.id)
    assert (existing.total_sejours, existing.total_nuits) == (2, 7)


# ---------------------------------------------------------------------------
# Clients, rooms, history, notifications
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_clients_with_scores_recomputes_score(store, desk):
    await store.insert_client(ClientProfile(
        id="", full_name="Amani Bahati", whatsapp_number="970000001",
        total_sejours=5, total_nuits=15, email="amani@example.com", fidelite_score=10,
    ))
    await store.insert_client(ClientProfile(
        id="", full_name="Zawadi Neema", whatsapp_number="970000002",
        total_sejours=1, total_nuits=1,
    ))

    scored = await desk.clients_with_scores()
    assert [s.client.full_name for s in scored] == ["Amani Bahati", "Zawadi Neema"]
    assert (scored[0].score, scored[0].tier) == (100, "VIP")
    assert (scored[1].score, scored[1].tier) == (22, "Nouveau")

    assert [s.client.full_name for s in await desk.clients_with_scores(tag="vip")] == [
        "Amani Bahati"
    ]
    assert [s.client.full_name for s in await desk.clients_with_scores(search="zawadi")] == [
        "Zawadi Neema"
    ]
    by_name = await desk.clients_with_scores(sort_by="name")
    assert by_name[0].client.full_name == "Amani Bahati"


@pytest.mark.asyncio
async def test_room_board_counts_every_status(store, desk):
    a, b, c = await _rooms(store, "101", "102", "103")
    await desk.set_room_status(a.id, "Nettoyage")
    await desk.set_room_status(b.id, "Maintenance")

    board = await desk.room_board()
    assert board == {
        "Disponible": 1,
        "Occupée": 0,
        "Nettoyage": 1,
        "Réservée": 0,
        "Maintenance": 1,
    }


@pytest.mark.asyncio
async def test_unknown_room_status_rejected(store, desk):
    (room,) = await _rooms(store, "101")
    with pytest.raises(ValueError):
        await desk.set_room_status(room.id, "Détruite")


@pytest.mark.asyncio
async def test_reservation_history_joins_client_and_room(store, desk):
    first_room, second_room = await _rooms(store, "101", "102")
    await desk.register_client(_form(first_room), today=TODAY)
    await desk.register_client(
        _form(second_room, nom="Bahati", postnom="", prenom="Amani",
              whatsapp_number="990000009"),
        today=TODAY,
    )

    rows = await desk.reservation_history()
    assert [room.room_number for _, _, room in rows] == ["102", "101"]

    rows = await desk.reservation_history(search="mukendi")
    assert len(rows) == 1
    res, client, room = rows[0]
    assert client.full_name == "Mukendi Kalala Élodie"
    assert room.room_number == "101"

    assert await desk.reservation_history(status="terminee") == []


@pytest.mark.asyncio
async def test_notifications_unread_and_mark_read(store, desk):
    (room,) = await _rooms(store, "101")
    await desk.register_client(_form(room, document_type="CNI"), today=TODAY)

    unread = await desk.notifications(unread_only=True)
    assert len(unread) == 2

    assert await desk.mark_read(unread[0].id) == 1
    assert len(await desk.notifications(unread_only=True)) == 1
    assert await desk.mark_read() == 1
    assert await desk.notifications(unread_only=True) == []
    assert len(await desk.notifications()) == 2


@pytest.mark.asyncio
async def test_dashboard_stats(store, desk):
    a, b, c = await _rooms(store, "101", "102", "103")
    await desk.register_client(_form(a), today=TODAY)
    await desk.register_client(
        _form(b, nom="Bahati", prenom="Amani", postnom="", whatsapp_number="990000009"),
        today=date(2026, 3, 30),
    )
    await desk.set_room_status(c.id, "Nettoyage")
    await store.insert_reservation(Reservation(
        id="", client_id="c-old", room_id=c.id, check_in_date=TODAY,
        check_out_date=date(2026, 4, 2), number_of_days=1, total_price=40.0,
        status="completed",
    ))

    stats = await desk.dashboard_stats(today=TODAY)
    assert stats == DashboardStats(
        total_clients=2,
        total_rooms=3,
        available_rooms=0,
        occupied_rooms=2,
        active_reservations=2,
        today_check_ins=2,
    )


@pytest.mark.asyncio
async def test_dashboard_stats_empty_hotel(desk):
    stats = await desk.dashboard_stats(today=TODAY)
    assert stats == DashboardStats(0, 0, 0, 0, 0, 0)


# ---------------------------------------------------------------------------
# Admin login and management
# ---------------------------------------------------------------------------

ADMIN_NUMBER = "+243976938182"


class UnreachableAdminStore(InMemoryFrontDeskStore):

    async def find_active_admin(self, phone_number):
        raise ConnectionError("database down")


@pytest.mark.parametrize("raw, expected", [
    ("243 976 938 182", "+243976938182"),
    ("+243976938182", "+243976938182"),
    ("0976938182", "+243976938182"),
    (" +33612345678 ", "+33612345678"),
])
def test_normalize_admin_phone(raw, expected):
    assert normalize_admin_phone(raw) == expected


@pytest.mark.asyncio
async def test_admin_login_with_local_number(store, desk):
    admin = await desk.add_admin("Gérant", "0976 938 182")
    assert admin.phone_number == ADMIN_NUMBER

    assert (await desk.authenticate_admin("0976938182")).id == admin.id


@pytest.mark.asyncio
async def test_admin_login_refuses_number_off_allow_list(store, desk):
    await store.insert_admin(Admin(id="", name="Intrus", phone_number="+243970000001"))
    with pytest.raises(AdminAuthError, match="Numéro non autorisé. Accès refusé."):
        await desk.authenticate_admin("0970000001")


@pytest.mark.asyncio
async def test_admin_login_refuses_inactive_or_unknown_admin(store, desk):
    with pytest.raises(AdminAuthError):
        await desk.authenticate_admin(ADMIN_NUMBER)

    admin = await desk.add_admin("Gérant", ADMIN_NUMBER)
    await desk.toggle_admin(admin)
    with pytest.raises(AdminAuthError):
        await desk.authenticate_admin(ADMIN_NUMBER)


@pytest.mark.asyncio
async def test_admin_login_uses_configured_allow_list(store):
    desk = FrontDesk(store, settings=HotelSettings(admin_numbers=("+243970000001",)))
    await desk.add_admin("Réception", "0970000001")

    assert (await desk.authenticate_admin("243970000001")).name == "Réception"
    with pytest.raises(AdminAuthError):
        await desk.authenticate_admin(ADMIN_NUMBER)


@pytest.mark.asyncio
async def test_admin_login_falls_back_to_allow_list_when_store_fails():
    desk = FrontDesk(UnreachableAdminStore())

    admin = await desk.authenticate_admin("0976938182")
    assert (admin.name, admin.phone_number) == ("Administrateur", ADMIN_NUMBER)

    with pytest.raises(AdminAuthError):
        await desk.authenticate_admin("0970000001")


@pytest.mark.asyncio
async def test_admin_management(store, desk):
    first = await desk.add_admin("Gérant", ADMIN_NUMBER)
    second = await desk.add_admin("Réception", "+243974156933")
    assert [a.name for a in await desk.admins()] == ["Gérant", "Réception"]

    await desk.toggle_admin(first)
    assert [a.is_active for a in await desk.admins()] == [False, True]

    await desk.remove_admin(second.id)
    assert [a.id for a in await desk.admins()] == [first.id]

    with pytest.raises(ValueError):
        await desk.add_admin("", ADMIN_NUMBER)
