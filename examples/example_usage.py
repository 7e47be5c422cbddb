"""Example: use the service layer directly, without Flask.

Controllers are thin; the membership and attendance rules live in services.
"""

import importlib

from config import get_settings_module

from src.gym_portal.gym_portal.container import build_container


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, timezone_name=settings.TIMEZONE)

    entitlement = container.membership_service.entitlement_for(user_id=1)
    print(entitlement.display_name, entitlement.expiry_phrase)
    print(container.attendance_service.stats().to_dict())


if __name__ == "__main__":
    main()
