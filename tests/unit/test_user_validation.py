from __future__ import annotations

import pytest

from conduit_users.domain.users.validation import (
    UserValidationError,
    validate_login,
    validate_profile_update,
    validate_registration,
)


def test_registration_reports_every_blank_field() -> None:
    with pytest.raises(UserValidationError) as exc_info:
        validate_registration(username=None, email=None, password=None)

    assert exc_info.value.errors == {
        "email": ["can't be blank"],
        "password": ["can't be blank"],
        "username": ["can't be blank"],
    }


def test_registration_treats_whitespace_as_blank() -> None:
    with pytest.raises(UserValidationError) as exc_info:
        validate_registration(username="   ", email="jake@example.org", password="\t")

    assert exc_info.value.errors == {
        "password": ["can't be blank"],
        "username": ["can't be blank"],
    }


def test_registration_normalizes_username_and_email_but_not_password() -> None:
    data = validate_registration(
        username="  Jake.Doe_42 ",
        email=" Jake@Example.org ",
        password=" spaced password ",
    )

    assert data.username == "Jake.Doe_42"
    assert data.email == "Jake@Example.org"
    assert data.password == " spaced password "


@pytest.mark.parametrize("email", ["jake", "jake@example", "jake @example.org", "@."])
def test_registration_rejects_malformed_email(email: str) -> None:
    with pytest.raises(UserValidationError) as exc_info:
        validate_registration(username="jake", email=email, password="pw")

    assert exc_info.value.errors == {"email": ["is invalid"]}


def test_registration_rejects_username_with_spaces() -> None:
    with pytest.raises(UserValidationError) as exc_info:
        validate_registration(username="jake doe", email="jake@example.org", password="pw")

    assert exc_info.value.errors == {"username": ["is invalid"]}


def test_registration_rejects_password_beyond_bcrypt_limit() -> None:
    with pytest.raises(UserValidationError) as exc_info:
        validate_registration(username="jake", email="jake@example.org", password="x" * 73)

    assert exc_info.value.errors == {"password": ["is too long (maximum is 72 bytes)"]}


def test_login_missing_fields_collapse_into_credentials_error() -> None:
    with pytest.raises(UserValidationError) as exc_info:
        validate_login(email=None, password="pw")

    assert exc_info.value.errors == {"email or password": ["is invalid"]}


def test_login_strips_email_only() -> None:
    data = validate_login(email=" jake@example.org ", password=" pw ")

    assert data.email == "jake@example.org"
    assert data.password == " pw "


def test_profile_update_accepts_empty_payload() -> None:
    update = validate_profile_update({})

    assert update.provided == frozenset()


def test_profile_update_ignores_unknown_fields() -> None:
    update = validate_profile_update({"bio": "hello", "role": "admin"})  # type: ignore[dict-item]

    assert update.provided == frozenset({"bio"})
    assert update.bio == "hello"


def test_profile_update_clears_bio_and_image_with_null_or_empty() -> None:
    update = validate_profile_update({"bio": "", "image": None})

    assert update.provided == frozenset({"bio", "image"})
    assert update.bio is None
    assert update.image is None


def test_profile_update_requires_non_blank_identity_fields_when_present() -> None:
    with pytest.raises(UserValidationError) as exc_info:
        validate_profile_update({"username": None, "email": " ", "password": ""})

    assert exc_info.value.errors == {
        "email": ["can't be blank"],
        "password": ["can't be blank"],
        "username": ["can't be blank"],
    }


@pytest.mark.parametrize(
    "image",
    [
        "ftp://example.org/a.png",
        "not a url",
        "https://",
        "http://exa mple.com/a.png",
        "https://:::/x",
        "http://[bad/x",
    ],
)
def test_profile_update_rejects_invalid_image_url(image: str) -> None:
    with pytest.raises(UserValidationError) as exc_info:
        validate_profile_update({"image": image})

    assert exc_info.value.errors == {"image": ["is invalid"]}


def test_profile_update_normalizes_accepted_fields() -> None:
    update = validate_profile_update(
        {
            "email": " new@example.org ",
            "image": " https://example.org/me.png ",
            "password": "new-password",
        }
    )

    assert update.email == "new@example.org"
    assert update.image == "https://example.org/me.png"
    assert update.password == "new-password"
    assert update.username is None
