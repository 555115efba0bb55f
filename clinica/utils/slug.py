import re
import secrets
import unicodedata


def generate_slug(name: str) -> str:
    """URL-safe slug from a display name plus a short random suffix."""
    text = unicodedata.normalize("NFKD", name or "").encode("ascii", "ignore").decode()
    text = re.sub(r"[^a-zA-Z0-9]+", "-", text).strip("-").lower()
    suffix = secrets.token_hex(3)
    return f"{text}-{suffix}" if text else suffix
