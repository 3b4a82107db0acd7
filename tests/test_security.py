import pytest

from hostelkit.core.exceptions import UsernameUnavailableError, ValidationError
from hostelkit.services.common.security import (
    base_username,
    derive_username,
    generate_password,
    hash_password,
    verify_password,
)


def test_password_round_trip():
    hashed = hash_password("s3cret-pass")
    assert hashed != "s3cret-pass"
    assert verify_password("s3cret-pass", hashed)
    assert not verify_password("wrong", hashed)


def test_empty_password_is_rejected():
    with pytest.raises(ValidationError):
        hash_password("")


def test_long_passwords_are_not_truncated():
    hashed = hash_password("x" * 80)
    assert not verify_password("x" * 79, hashed)


def test_generated_password_mixes_letters_and_digits():
    password = generate_password(12)
    assert len(password) == 12
    assert any(c.isalpha() for c in password)
    assert any(c.isdigit() for c in password)


@pytest.mark.parametrize(
    "full_name, cnic, expected",
    [
        ("Ali Raza", "35202-1234567-1", "ali5671"),
        ("  Zainab  Bibi ", "3520112345670", "zainab5670"),
        ("O'Neil Smith", "35202-0000001-9", "oneil0019"),
        ("---", "35202-1234567-1", "student5671"),
    ],
)
def test_base_username(full_name, cnic, expected):
    assert base_username(full_name, cnic) == expected


def test_derive_username_appends_suffix():
    taken = {"ali5671", "ali56711"}
    assert derive_username("Ali Raza", "35202-1234567-1", taken.__contains__) == "ali56712"


def test_derive_username_gives_up():
    with pytest.raises(UsernameUnavailableError):
        derive_username("Ali Raza", "35202-1234567-1", lambda _: True, max_attempts=3)
