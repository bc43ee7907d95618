"""
Hotel-wide settings, read from the environment.

Only values the workflows actually use live here; credentials for the
store, the classifier and the message channels are read by their
factories.
"""

import os
from dataclasses import dataclass

DEFAULT_ADMIN_NUMBERS = ("+243976938182", "+243974156933")


@dataclass(frozen=True)
class HotelSettings:
    hotel_name: str = "Hôtel Touriste"
    chatbot_url: str = "/chat"
    default_country_code: str = "+243"
    db_path: str = "data/frontdesk.db"
    # Numbers allowed to open the admin screens, international format
    admin_numbers: tuple[str, ...] = DEFAULT_ADMIN_NUMBERS

    @classmethod
    def from_env(cls) -> "HotelSettings":
        admin_numbers = os.environ.get("ADMIN_NUMBERS")
        return cls(
            hotel_name=os.environ.get("HOTEL_NAME", cls.hotel_name),
            chatbot_url=os.environ.get("CHATBOT_URL", cls.chatbot_url),
            default_country_code=os.environ.get("DEFAULT_COUNTRY_CODE", cls.default_country_code),
            db_path=os.environ.get("DB_PATH", cls.db_path),
            admin_numbers=(
                tuple(n.strip() for n in admin_numbers.split(",") if n.strip())
                if admin_numbers
                else DEFAULT_ADMIN_NUMBERS
            ),
        )
