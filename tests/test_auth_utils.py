import pytest

from yourbuzzfeed.utils.auth_utils import hash_password, verify_password


@pytest.mark.parametrize('password', ['admin123', 'p', 'correct horse battery staple', 'пароль-ü-✓'])
def test_hash_then_verify(password):
    assert verify_password(password, hash_password(password))


def test_stored_format_is_hex_key_dot_salt():
    hashed, salt = hash_password('admin123').split('.')
    assert len(hashed) == 128
    assert len(salt) == 32
    int(hashed, 16)
    int(salt, 16)


def test_same_password_gets_a_fresh_salt():
    assert hash_password('admin123') != hash_password('admin123')


def test_wrong_password_fails():
    stored = hash_password('admin123')
    assert not verify_password('admin124', stored)
    assert not verify_password('Admin123', stored)
    assert not verify_password('admin12', stored)
    assert not verify_password('', stored)


def test_single_character_change_in_hash_fails():
    stored = hash_password('admin123')
    flipped = ('0' if stored[0] != '0' else '1') + stored[1:]
    assert not verify_password('admin123', flipped)


def test_single_character_change_in_salt_fails():
    stored = hash_password('admin123')
    flipped = stored[:-1] + ('0' if stored[-1] != '0' else '1')
    assert not verify_password('admin123', flipped)


@pytest.mark.parametrize('stored', [
    '',
    'no-delimiter',
    '.salt',
    'abcd.',
    'zz' * 64 + '.00112233445566778899aabbccddeeff',
    'abcd.00112233445566778899aabbccddeeff',
    None,
])
def test_malformed_hash_never_verifies(stored):
    assert verify_password('admin123', stored) is False
