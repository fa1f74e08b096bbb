import re
import uuid
from sqlalchemy.orm import Session
from app.models.user import User

PHONE_RE = re.compile(r"^07\d{8}$")
INVALID_PHONE = "Te rugăm să introduci un număr de telefon valid (ex: 07XX XXX XXX)."


def normalize_phone(phone: str | None) -> str:
    """Romanian mobile number as 07XXXXXXXX. Raises ValueError otherwise."""
    s = re.sub(r"[\s\-().]", "", phone or "")
    if s.startswith("+40"):
        s = "0" + s[3:]
    elif s.startswith("0040"):
        s = "0" + s[4:]
    if not PHONE_RE.match(s):
        raise ValueError(INVALID_PHONE)
    return s


def get_or_create_booker(db: Session, email: str, name: str = "", phone: str | None = None) -> User:
    email = (email or "").strip().lower()
    if not email or "@" not in email:
        raise ValueError("A valid email is required")
    u = db.query(User).filter(User.email == email).first()
    if u:
        if name and not u.full_name:
            u.full_name = name
            db.commit()
        return u
    u = User(
        id=str(uuid.uuid4()),
        email=email,
        full_name=name or "",
        phone=phone or "",
    )
    db.add(u)
    db.commit()
    return u
