"""
Meeting links for interview schedules.

Links are generated locally; no calendar or conferencing API is called.
"""

import secrets
import string

MEETING_ID_LENGTH = 13
_ALPHABET = string.ascii_lowercase + string.digits

PLATFORM_BASE_URLS = {
    "google_meet": "https://meet.google.com",
    "zoom": "https://zoom.us/j",
    "teams": "https://teams.microsoft.com/l/meetup-join",
}


def generate_meeting_id(length: int = MEETING_ID_LENGTH) -> str:
    return "".join(secrets.choice(_ALPHABET) for _ in range(length))


def meeting_url(platform: str, simplifyhr_base_url: str) -> str:
    """
    Link for ``platform``. The built-in platform uses the configured base URL.

    Raises:
        ValueError: unknown platform
    """
    if platform == "simplifyhr":
        base = simplifyhr_base_url
    elif platform in PLATFORM_BASE_URLS:
        base = PLATFORM_BASE_URLS[platform]
    else:
        raise ValueError(f"Unknown meeting platform '{platform}'")
    return f"{base.rstrip('/')}/{generate_meeting_id()}"
