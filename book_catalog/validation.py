"""Server-side validation of BookInput payloads."""

from typing import Any, Dict, Mapping

from .dates import parse_pub_date
from .errors import ValidationError
from .genres import GENRES, normalize_genre

# wire name -> (internal name, max length)
TEXT_FIELDS = {
    "title": ("title", 500),
    "author": ("author", 255),
    "isbn": ("isbn", 20),
}
BOOK_FIELDS = ("title", "author", "isbn", "pubDate", "genre")


def get_json_field(data, name, required=False, maxlen=None):
    val = data.get(name)
    if val is None:
        if required:
            return None, "Field is required"
        return None, None
    if not isinstance(val, str):
        return None, "Must be a string"
    s = val.strip()
    if not s:
        return None, "Cannot be empty"
    if maxlen and len(s) > maxlen:
        return None, f"Too long (max {maxlen})"
    return s, None


def clean_book_input(data: Mapping[str, Any], partial: bool = False) -> Dict[str, Any]:
    """Validate a BookInput (or a patch of one) and return cleaned values.

    Keys of the result are internal names: title, author, isbn, pub_date,
    genre. With ``partial`` only the fields present in ``data`` are checked
    and returned; a full payload requires all five.
    """
    if not isinstance(data, Mapping):
        raise ValidationError("Request body must be a JSON object")
    if partial:
        if "id" in data:
            raise ValidationError({"id": ["id cannot be changed"]})
        if not any(f in data for f in BOOK_FIELDS):
            raise ValidationError("No fields to update.")

    errors = {}
    cleaned = {}

    for wire_name, (name, maxlen) in TEXT_FIELDS.items():
        if partial and wire_name not in data:
            continue
        value, err = get_json_field(data, wire_name, required=True, maxlen=maxlen)
        if err:
            errors.setdefault(wire_name, []).append(err)
        else:
            cleaned[name] = value

    if not partial or "pubDate" in data:
        raw = data.get("pubDate")
        if raw is None or raw == "":
            errors.setdefault("pubDate", []).append("Field is required")
        else:
            try:
                cleaned["pub_date"] = parse_pub_date(raw)
            except ValueError:
                errors.setdefault("pubDate", []).append(
                    "Invalid date format. Use YYYY-MM-DD or yyyymmdd."
                )

    if not partial or "genre" in data:
        raw = data.get("genre")
        if raw is None or raw == "":
            errors.setdefault("genre", []).append("Field is required")
        else:
            genre = normalize_genre(raw)
            if genre is None:
                errors.setdefault("genre", []).append(
                    f"Genre '{raw}' does not exist. Choose one of: {', '.join(GENRES)}"
                )
            else:
                cleaned["genre"] = genre

    if errors:
        raise ValidationError(errors)
    return cleaned
