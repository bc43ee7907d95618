#!/usr/bin/env python3
"""
Front desk CLI — clients, rooms, registrations, outbound messages, admins.

Usage (from project root):
    python scripts/frontdesk.py clients [search] [vip|fidele]   # clients by loyalty
    python scripts/frontdesk.py rooms                           # room board
    python scripts/frontdesk.py room-type <name> <price>        # add a room type
    python scripts/frontdesk.py room <number> <type id> [floor] # add a room
    python scripts/frontdesk.py status <room id> <status>       # change a room's status
    python scripts/frontdesk.py register                        # register a client (interactive)
    python scripts/frontdesk.py dashboard                       # headline counts
    python scripts/frontdesk.py send <client id> [category]     # message a client
    python scripts/frontdesk.py send-template <client id> <template id>
    python scripts/frontdesk.py logs [limit]                    # outbound message history
    python scripts/frontdesk.py templates                       # staff message templates
    python scripts/frontdesk.py template-add <name> <trigger> <days> <content>
    python scripts/frontdesk.py template-toggle <template id>
    python scripts/frontdesk.py template-delete <template id>
    python scripts/frontdesk.py admins                          # admin accounts
    python scripts/frontdesk.py admin-add <name> <phone>
    python scripts/frontdesk.py admin-toggle <admin id>
    python scripts/frontdesk.py admin-delete <admin id>
    python scripts/frontdesk.py login <phone>                   # check an admin number
    python scripts/frontdesk.py history [search]                # reservation history
    python scripts/frontdesk.py notifications                   # unread notifications
    python scripts/frontdesk.py read [notification id]          # mark notifications read

Environment variables: STORE_BACKEND, DB_PATH, SUPABASE_URL, SUPABASE_KEY,
MESSAGE_CHANNEL (whatsapp/email/console), EMAIL_*, HOTEL_NAME, CHATBOT_URL,
ADMIN_NUMBERS (comma-separated allow-list for admin login).
"""

import asyncio
import logging
import os
import random
import sys
import textwrap
from dataclasses import replace

# Allow running as `python scripts/frontdesk.py` from project root.
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from src.adapters.factory import create_store
from src.communication.factory import create_channel
from src.domain.records import ROOM_STATUSES, MessageTemplate, Room, RoomType
from src.domain.store import FrontDeskStore
from src.frontdesk import AdminAuthError, FrontDesk, RegistrationError, RegistrationForm
from src.outreach import AUTO_CATEGORY, Outreach, OutreachConfig, OutreachError
from src.settings import HotelSettings

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-7s  %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)


def _wrap(text: str, width: int = 72, indent: str = "    ") -> str:
    return textwrap.fill(text, width=width, initial_indent=indent, subsequent_indent=indent)


def _ask(prompt: str, default: str = "") -> str:
    return input(prompt).strip() or default


async def list_clients(desk: FrontDesk, search: str | None, tag: str | None) -> None:
    clients = await desk.clients_with_scores(search=search, tag=tag)
    if not clients:
        print("No clients.")
        return

    print(f"\n{'Name':<28}  {'WhatsApp':<16}  {'Stays':>5}  {'Nights':>6}  {'Score':>5}  Tier")
    print("-" * 80)
    for s in clients:
        c = s.client
        number = f"{c.whatsapp_country_code}{c.whatsapp_number}"
        print(
            f"{c.full_name[:28]:<28}  {number:<16}  {c.total_sejours:>5}  "
            f"{c.total_nuits:>6}  {s.score:>4}%  {s.tier}"
        )
    print()


async def show_rooms(store: FrontDeskStore, desk: FrontDesk) -> None:
    board = await desk.room_board()
    print("\n" + "  ".join(f"{status}: {count}" for status, count in board.items()))
    print("-" * 60)
    for room in await store.list_rooms():
        print(f"{room.room_number:>6}  floor {room.floor:<3}  {room.status:<14}  {room.id}")
    print()


async def register(store: FrontDeskStore, desk: FrontDesk) -> None:
    available = await store.list_rooms(status="Disponible")
    if not available:
        print("No room available.")
        return
    print("Available rooms: " + ", ".join(f"{r.room_number} ({r.id[:8]})" for r in available))

    number = _ask("Room number: ")
    room = next((r for r in available if r.room_number == number), None)
    if room is None:
        print(f"Room {number!r} is not available.")
        return

    form = RegistrationForm(
        nom=_ask("Nom: "),
        postnom=_ask("Postnom: "),
        prenom=_ask("Prénom: "),
        whatsapp_number=_ask("WhatsApp: "),
        whatsapp_country_code=_ask("Country code [+243]: ", "+243"),
        email=_ask("Email (optional): ") or None,
        nationality=_ask("Nationality (optional): ") or None,
        document_type=_ask("Document type (optional): ") or None,
        room_id=room.id,
        number_of_days=int(_ask("Nights [1]: ", "1")),
    )
    try:
        result = await desk.register_client(form)
    except RegistrationError as exc:
        print(f"Registration refused: {exc}")
        return

    print(f"\nClient {result.client.full_name} registered in room {result.room.room_number}.")
    print(f"  Reservation: {result.reservation.id}  ({result.reservation.total_price:.2f})")
    if result.is_duplicate:
        print(f"  Returning client: fidelity {result.client.fidelite_score}%")


def _outreach(store: FrontDeskStore, settings: HotelSettings) -> Outreach:
    return Outreach(
        OutreachConfig(
            store=store,
            channel=create_channel(),
            rng=random.Random(),
            settings=settings,
        )
    )


async def dashboard(desk: FrontDesk) -> None:
    stats = await desk.dashboard_stats()
    print(f"\n  Clients:              {stats.total_clients}")
    print(f"  Rooms:                {stats.total_rooms}")
    print(f"    available:          {stats.available_rooms}")
    print(f"    occupied:           {stats.occupied_rooms}")
    print(f"  Active reservations:  {stats.active_reservations}")
    print(f"  Check-ins today:      {stats.today_check_ins}\n")


async def send(
    outreach: Outreach, client_id: str, category: str, template_id: str | None = None
) -> None:
    try:
        result = await outreach.send(client_id, category=category, template_id=template_id)
    except (OutreachError, ValueError) as exc:
        print(f"Not sent: {exc}")
        return

    print(f"\n[{result.category}]")
    print(_wrap(result.body))
    if result.reference:
        print(f"\n  {result.reference}")
    print()


async def logs(outreach: Outreach, limit: int) -> None:
    entries, sent = await outreach.history(limit)
    print(f"\n{sent} message(s) sent out of the last {len(entries)}.")
    print("-" * 80)
    for m in entries:
        when = m.date.strftime("%Y-%m-%d %H:%M") if m.date else ""
        print(f"{when}  {m.canal:<9}  {m.statut:<7}  {m.category:<14}  client {m.client_id}")
    print()


async def templates(outreach: Outreach) -> None:
    items = await outreach.templates()
    if not items:
        print("No templates.")
        return
    for t in items:
        state = "active" if t.is_active else "off"
        print(f"{t.name}  [{t.trigger}, {t.days_threshold} days, {state}]  ({t.id})")
        print(_wrap(t.content))


async def toggle_template(store: FrontDeskStore, outreach: Outreach, template_id: str) -> None:
    template = await store.get_template(template_id)
    if template is None:
        print(f"No template {template_id!r}.")
        return
    await outreach.save_template(replace(template, is_active=not template.is_active))
    print(f"Template {template.name} is now {'off' if template.is_active else 'active'}.")


async def admins(desk: FrontDesk) -> None:
    for a in await desk.admins():
        state = "active" if a.is_active else "off"
        print(f"{a.name:<24}  {a.phone_number:<16}  {state:<6}  ({a.id})")


async def toggle_admin(desk: FrontDesk, admin_id: str) -> None:
    admin = next((a for a in await desk.admins() if a.id == admin_id), None)
    if admin is None:
        print(f"No admin {admin_id!r}.")
        return
    await desk.toggle_admin(admin)
    print(f"Admin {admin.name} is now {'off' if admin.is_active else 'active'}.")


async def history(desk: FrontDesk, search: str | None) -> None:
    rows = await desk.reservation_history(search=search)
    if not rows:
        print("No reservations.")
        return

    print(f"\n{'Check-in':<10}  {'Out':<10}  {'Room':>6}  {'Nights':>6}  {'Total':>9}  Client")
    print("-" * 80)
    for res, client, room in rows:
        print(
            f"{res.check_in_date.isoformat():<10}  {res.check_out_date.isoformat():<10}  "
            f"{room.room_number if room else '?':>6}  {res.number_of_days:>6}  "
            f"{res.total_price:>9.2f}  {client.full_name if client else '?'}"
        )
    print()


async def notifications(desk: FrontDesk) -> None:
    items = await desk.notifications(unread_only=True)
    if not items:
        print("No unread notifications.")
        return
    for n in items:
        when = n.date.strftime("%Y-%m-%d %H:%M") if n.date else ""
        print(f"{when}  [{n.type}] {n.titre}  ({n.id})")
        print(_wrap(n.body))


async def main() -> None:
    settings = HotelSettings.from_env()
    store = create_store(db_path=settings.db_path)
    desk = FrontDesk(store, settings=settings)

    args = sys.argv[1:]
    cmd = args[0] if args else "clients"

    if cmd == "clients":
        tag = next((a for a in args[1:] if a in ("vip", "fidele")), None)
        search = next((a for a in args[1:] if a not in ("vip", "fidele")), None)
        await list_clients(desk, search, tag)
    elif cmd == "rooms":
        await show_rooms(store, desk)
    elif cmd == "room-type" and len(args) >= 3:
        rt = await store.insert_room_type(RoomType(id="", name=args[1], base_price=float(args[2])))
        print(f"Room type {rt.name} created: {rt.id}")
    elif cmd == "room" and len(args) >= 3:
        floor = int(args[3]) if len(args) >= 4 else 0
        room = await store.insert_room(
            Room(id="", room_number=args[1], room_type_id=args[2], floor=floor)
        )
        print(f"Room {room.room_number} created: {room.id}")
    elif cmd == "status" and len(args) >= 3:
        if args[2] not in ROOM_STATUSES:
            print(f"Status must be one of: {', '.join(ROOM_STATUSES)}")
            return
        await desk.set_room_status(args[1], args[2])
        print(f"Room {args[1]} is now {args[2]}.")
    elif cmd == "register":
        await register(store, desk)
    elif cmd == "dashboard":
        await dashboard(desk)
    elif cmd == "send" and len(args) >= 2:
        category = args[2] if len(args) >= 3 else AUTO_CATEGORY
        await send(_outreach(store, settings), args[1], category)
    elif cmd == "send-template" and len(args) >= 3:
        await send(_outreach(store, settings), args[1], AUTO_CATEGORY, template_id=args[2])
    elif cmd == "logs":
        await logs(_outreach(store, settings), int(args[1]) if len(args) >= 2 else 50)
    elif cmd == "templates":
        await templates(_outreach(store, settings))
    elif cmd == "template-add" and len(args) >= 5:
        try:
            t = await _outreach(store, settings).save_template(MessageTemplate(
                id="", name=args[1], trigger=args[2], days_threshold=int(args[3]),
                content=" ".join(args[4:]),
            ))
        except OutreachError as exc:
            print(f"Template refused: {exc}")
            return
        print(f"Template {t.name} created: {t.id}")
    elif cmd == "template-toggle" and len(args) >= 2:
        await toggle_template(store, _outreach(store, settings), args[1])
    elif cmd == "template-delete" and len(args) >= 2:
        await _outreach(store, settings).delete_template(args[1])
        print(f"Template {args[1]} deleted.")
    elif cmd == "admins":
        await admins(desk)
    elif cmd == "admin-add" and len(args) >= 3:
        admin = await desk.add_admin(args[1], args[2])
        print(f"Admin {admin.name} ({admin.phone_number}) created: {admin.id}")
    elif cmd == "admin-toggle" and len(args) >= 2:
        await toggle_admin(desk, args[1])
    elif cmd == "admin-delete" and len(args) >= 2:
        await desk.remove_admin(args[1])
        print(f"Admin {args[1]} deleted.")
    elif cmd == "login" and len(args) >= 2:
        try:
            admin = await desk.authenticate_admin(args[1])
        except AdminAuthError as exc:
            print(exc)
            return
        print(f"Bienvenue {admin.name}.")
    elif cmd == "history":
        await history(desk, args[1] if len(args) >= 2 else None)
    elif cmd == "notifications":
        await notifications(desk)
    elif cmd == "read":
        count = await desk.mark_read(args[1] if len(args) >= 2 else None)
        print(f"{count} notification(s) marked as read.")
    else:
        print(__doc__)


if __name__ == "__main__":
    asyncio.run(main())
