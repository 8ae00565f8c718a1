"""
Kenyan phone number validation
"""
import re
from app.errors import ValidationError


def normalize_kenyan_phone(phone: str) -> str:
    """
    Return the canonical 0XXXXXXXXX form of a Kenyan mobile number.

    Accepts 712345678, 0712345678, 0112345678, 254712345678 and
    +254712345678 (any punctuation is ignored).
    """
    if not isinstance(phone, str):
        raise ValidationError("Please enter a valid Kenyan phone number (e.g., 0712345678)")

    cleaned = re.sub(r"\D", "", phone)

    if len(cleaned) == 9 and cleaned.startswith("7"):
        return "0" + cleaned
    if len(cleaned) == 10 and cleaned.startswith(("07", "01")):
        return cleaned
    if len(cleaned) == 12 and cleaned.startswith("254"):
        return "0" + cleaned[3:]
    if len(cleaned) == 13 and cleaned.startswith("254"):
        return "0" + cleaned[4:]

    raise ValidationError("Please enter a valid Kenyan phone number (e.g., 0712345678)")
