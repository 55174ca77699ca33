"""Tests for PIN hashing and format-tagged verification"""

import hashlib

import pytest

from services.credentials import (
    CURRENT_FORMAT, FORMAT_LEGACY, FORMAT_SALTED_SHA256, UnknownHashFormat,
    hash_pin, is_valid_pin, verify_pin,
)


@pytest.mark.parametrize('pin', ['0000', '1234', '9876'])
def test_four_digit_pins_are_valid(pin):
    assert is_valid_pin(pin) is True


@pytest.mark.parametrize('pin', ['123', '12345', '12a4', '', ' 123', None, 1234, '١٢٣٤'])
def test_other_pins_are_invalid(pin):
    assert is_valid_pin(pin) is False


def test_hash_pin_is_salted_and_tagged():
    first, fmt = hash_pin('1234')
    second, _ = hash_pin('1234')

    assert fmt == CURRENT_FORMAT
    assert '1234' not in first
    assert first != second


def test_verify_current_format():
    stored, fmt = hash_pin('1234')

    assert verify_pin('1234', stored, fmt) == (True, False)
    assert verify_pin('4321', stored, fmt) == (False, False)


def test_verify_legacy_format_flags_upgrade():
    stored = hashlib.sha256(b'1234').hexdigest()

    assert verify_pin('1234', stored, FORMAT_LEGACY) == (True, True)
    assert verify_pin('1111', stored, FORMAT_LEGACY) == (False, False)


def test_verify_salted_sha256_format():
    salt = 'a' * 32
    stored = f"{salt}:{hashlib.sha256(f'{salt}:1234'.encode()).hexdigest()}"

    assert verify_pin('1234', stored, FORMAT_SALTED_SHA256) == (True, True)
    assert verify_pin('9999', stored, FORMAT_SALTED_SHA256) == (False, False)


def test_format_tag_decides_verifier():
    # A legacy digest checked under the salted tag must not match
    stored = hashlib.sha256(b'1234').hexdigest()
    assert verify_pin('1234', stored, FORMAT_SALTED_SHA256) == (False, False)


def test_unknown_format_raises():
    with pytest.raises(UnknownHashFormat):
        verify_pin('1234', 'whatever', 'md5')


def test_empty_hash_never_matches():
    assert verify_pin('1234', '', FORMAT_LEGACY) == (False, False)
