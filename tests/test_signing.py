import pytest

from vccore.errors import InvalidKeyMaterial
from vccore.keys import IdentityKey, generate
from vccore.signing import ed25519_sign, ed25519_verify

# RFC 8032 section 7.1, TEST 1
RFC_SECRET = bytes.fromhex("9d61b19deffd5a60ba844af492ec2cc44449c5697b326919703bac031cae7f60")
RFC_PUBLIC = bytes.fromhex("d75a980182b10ab7d54bfed3c964073a0ee172f3daa62325af021a68f707511a")
RFC_SIG = bytes.fromhex(
    "e5564300c360ac729086e2cc806e828a84877f1eb8e5d974d873e065224901555"
    "fb8821590a33bacc61e39701cf9b46bd25bf5f0595bbe24655141438e7a100b"
)


def test_rfc8032_vector():
    key = IdentityKey.from_private_key(RFC_SECRET)
    assert key.public_key == RFC_PUBLIC
    assert ed25519_sign(b"", RFC_SECRET) == RFC_SIG
    assert ed25519_verify(b"", RFC_SIG, RFC_PUBLIC)


def test_sign_is_deterministic():
    key = generate(b"seed-A")
    msg = b"header.payload"
    sig1 = ed25519_sign(msg, key.private_key)
    sig2 = ed25519_sign(msg, key.private_key)
    assert sig1 == sig2
    assert len(sig1) == 64


def test_verify_roundtrip_and_wrong_message():
    key = generate(b"seed-A")
    sig = ed25519_sign(b"hello", key.private_key)
    assert ed25519_verify(b"hello", sig, key.public_key)
    assert not ed25519_verify(b"hellO", sig, key.public_key)


def test_verify_wrong_key():
    sig = ed25519_sign(b"hello", generate(b"seed-A").private_key)
    assert not ed25519_verify(b"hello", sig, generate(b"seed-B").public_key)


@pytest.mark.parametrize("sig", [b"", b"\x00" * 63, b"\x00" * 65, b"\xff" * 64, "not-bytes"])
def test_verify_fails_closed_on_bad_signature(sig):
    assert not ed25519_verify(b"hello", sig, generate(b"seed-A").public_key)


@pytest.mark.parametrize("pub", [b"", b"\x00" * 31, b"\xff" * 32, None])
def test_verify_fails_closed_on_bad_public_key(pub):
    sig = ed25519_sign(b"hello", generate(b"seed-A").private_key)
    assert not ed25519_verify(b"hello", sig, pub)


def test_sign_rejects_bad_key_length():
    with pytest.raises(InvalidKeyMaterial):
        ed25519_sign(b"hello", b"\x01" * 31)
