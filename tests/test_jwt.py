import pytest

from vccore import jwt
from vccore.encoding import b64url_decode, b64url_encode
from vccore.errors import (
    InvalidEncoding,
    InvalidPayloadSchema,
    InvalidSignatureLength,
    MalformedStructure,
)

SIG = bytes(range(64))


def payload(**overrides):
    p = {
        "vc": {"issuer": {"id": "did:key:z6MkIssuer"}, "credentialSubject": {"id": "S1", "name": "Alice"}},
        "iss": "did:key:z6MkIssuer",
        "sub": "S1",
        "exp": 1800000000,
    }
    p.update(overrides)
    return p


def test_header_segment_is_bit_exact():
    token = jwt.encode(jwt.HEADER, payload(), SIG)
    assert token.split(".")[0] == "eyJhbGciOiJFZERTQSIsInR5cCI6IkpXVCJ9"
    assert "=" not in token


def test_decode_inverts_encode():
    p = payload()
    token = jwt.encode(jwt.HEADER, p, SIG)
    decoded = jwt.decode(token)
    assert decoded.header == jwt.HEADER
    assert decoded.payload == p
    assert decoded.signature == SIG
    assert decoded.signing_input == jwt.signing_input(jwt.HEADER, p)
    assert jwt.encode(decoded.header, decoded.payload, decoded.signature) == token


@pytest.mark.parametrize("token", ["a.b", "a.b.c.d", "", "nodots"])
def test_wrong_segment_count(token):
    with pytest.raises(MalformedStructure):
        jwt.decode(token)


def test_non_string_token():
    with pytest.raises(MalformedStructure):
        jwt.decode(None)


def test_non_base64url_characters():
    h, p, s = jwt.encode(jwt.HEADER, payload(), SIG).split(".")
    with pytest.raises(InvalidEncoding):
        jwt.decode(f"{h}.{p}+/.{s}")
    with pytest.raises(InvalidEncoding):
        jwt.decode(f"{h}.{p}.{s}==")


def test_non_canonical_trailing_bits():
    h, p, s = jwt.encode(jwt.HEADER, payload(), SIG).split(".")
    # 64 bytes leave 4 unused bits in the last character
    alphabet = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_"
    last = alphabet.index(s[-1])
    sibling = alphabet[last ^ 1]
    with pytest.raises(InvalidEncoding):
        jwt.decode(f"{h}.{p}.{s[:-1]}{sibling}")


def test_b64url_decode_rejects_non_canonical():
    assert b64url_decode("QQ") == b"A"
    for text in ("QR", "QQ\n", "QUJ"):
        with pytest.raises(InvalidEncoding):
            b64url_decode(text)


def test_segment_not_json():
    h, _, s = jwt.encode(jwt.HEADER, payload(), SIG).split(".")
    with pytest.raises(InvalidEncoding):
        jwt.decode(f"{h}.{b64url_encode(b'not json')}.{s}")


def test_signature_length():
    h, p, _ = jwt.encode(jwt.HEADER, payload(), SIG).split(".")
    with pytest.raises(InvalidSignatureLength):
        jwt.decode(f"{h}.{p}.{b64url_encode(SIG[:32])}")


@pytest.mark.parametrize("bad", [
    {"vc": None},
    {"iss": ""},
    {"sub": 7},
    {"exp": "tomorrow"},
    {"iss": "did:key:z6MkOther"},
    {"sub": "S2"},
])
def test_payload_schema(bad):
    token = jwt.encode(jwt.HEADER, payload(**bad), SIG)
    with pytest.raises(InvalidPayloadSchema):
        jwt.decode(token)


def test_missing_claim():
    p = payload()
    del p["vc"]
    with pytest.raises(InvalidPayloadSchema):
        jwt.decode(jwt.encode(jwt.HEADER, p, SIG))


def test_wrong_algorithm():
    with pytest.raises(InvalidPayloadSchema):
        jwt.decode(jwt.encode({"alg": "none", "typ": "JWT"}, payload(), SIG))
