"""Tests for random password generation."""

import pytest

from aegis_vault.password_generator import (
    GENERATED_PASSWORD_LENGTH,
    PASSWORD_CHARACTER_SET,
    PasswordGenerationError,
    generate_random_password,
)


def test_default_length_and_alphabet():
    password = generate_random_password()

    assert len(password) == GENERATED_PASSWORD_LENGTH == 32
    assert set(password) <= set(PASSWORD_CHARACTER_SET)


def test_character_set_contents():
    assert set("@&$?!#*^+-.") <= set(PASSWORD_CHARACTER_SET)
    assert len(PASSWORD_CHARACTER_SET) == 26 + 26 + 10 + 11


def test_custom_length_and_charset():
    password = generate_random_password(64, charset="ab")
    assert len(password) == 64
    assert set(password) <= {"a", "b"}


def test_passwords_are_not_repeated():
    assert len({generate_random_password() for _ in range(20)}) == 20


@pytest.mark.parametrize("length", [0, -5])
def test_invalid_length(length):
    with pytest.raises(PasswordGenerationError):
        generate_random_password(length)


def test_empty_charset():
    with pytest.raises(PasswordGenerationError):
        generate_random_password(10, charset="")
