from datetime import datetime, timezone
from typing import Any

def parse_timestamp(value: Any) -> datetime:
    """
    Convertit un horodatage distant en datetime UTC.
    - Nombre: epoch en millisecondes (Date.now() côté JS)
    - Texte: ISO-8601 (suffixe 'Z' accepté)
    Soulève ValueError si la valeur n'est pas exploitable.
    """
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, bool) or value is None:
        raise ValueError(f"horodatage invalide: {value!r}")
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    text = str(value).strip()
    if text.isdigit():
        return datetime.fromtimestamp(int(text) / 1000, tz=timezone.utc)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
