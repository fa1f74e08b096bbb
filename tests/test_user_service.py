import pytest

from app.models.user import User
from app.services.user_service import INVALID_PHONE, get_or_create_booker, normalize_phone


@pytest.mark.parametrize("raw", ["0722 123 456", "+40722123456", "0040-722-123-456", "(0722) 123.456"])
def test_normalize_phone(raw):
    assert normalize_phone(raw) == "0722123456"


@pytest.mark.parametrize("raw", [None, "", "0622123456", "07221234", "+44722123456"])
def test_normalize_phone_rejects(raw):
    with pytest.raises(ValueError, match="număr de telefon valid"):
        normalize_phone(raw)
    assert "07XX" in INVALID_PHONE


def test_booker_is_found_by_lowercased_email(db, user):
    assert get_or_create_booker(db, "  ana@EXAMPLE.ro ").id == user.id
    assert db.query(User).count() == 1


def test_booker_requires_email(db):
    with pytest.raises(ValueError):
        get_or_create_booker(db, "not-an-email")


def test_name_added_to_existing_booker_is_saved(db):
    get_or_create_booker(db, "ion@example.ro")
    get_or_create_booker(db, "ion@example.ro", "Ion Ionescu")
    db.rollback()
    db.expire_all()
    assert db.query(User).filter(User.email == "ion@example.ro").one().full_name == "Ion Ionescu"


def test_existing_name_is_kept(db, user):
    get_or_create_booker(db, "ana@example.ro", "Alt Nume")
    assert user.full_name == "Ana Popescu"
