import base64

import pytest
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec, padding, rsa
from cryptography.hazmat.primitives.asymmetric.utils import decode_dss_signature
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from cloudssh.errors import UnsupportedKeyType
from cloudssh.sshutil import (
    ECDSAPublicKey,
    RFC8332PublicKey,
    Signature,
    ecdsa_public_key,
    ecdsa_signature_blob,
    encode_mpint,
    encode_string,
)


@pytest.fixture(scope="module")
def rsa_private():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


def _openssh_wire(public_key):
    line = public_key.public_bytes(Encoding.OpenSSH, PublicFormat.OpenSSH)
    return base64.b64decode(line.split()[1])


def test_encode_string():
    assert encode_string(b"testing") == b"\x00\x00\x00\x07testing"
    assert encode_string("abc") == encode_string(b"abc")


def test_encode_mpint_rfc_examples():
    assert encode_mpint(0) == b"\x00\x00\x00\x00"
    assert encode_mpint(0x80) == b"\x00\x00\x00\x02\x00\x80"
    assert encode_mpint(-0x1234) == b"\x00\x00\x00\x02\xed\xcc"


@pytest.mark.parametrize("value", [1, 127, 128, 255, 256, 2**64 + 3, 2**521 - 1])
def test_encode_mpint_positive_round_trip(value):
    encoded = encode_mpint(value)
    length = int.from_bytes(encoded[:4], "big")
    payload = encoded[4:]
    assert len(payload) == length
    assert payload[0] < 0x80
    assert int.from_bytes(payload, "big", signed=True) == value


@pytest.mark.parametrize("value", [-1, -128, -129, -(2**40)])
def test_encode_mpint_negative_round_trip(value):
    payload = encode_mpint(value)[4:]
    assert int.from_bytes(payload, "big", signed=True) == value


def test_ecdsa_signature_blob_concatenates_mpints():
    assert ecdsa_signature_blob(5, 0x80) == encode_mpint(5) + encode_mpint(0x80)


def test_rsa_types(rsa_private):
    pub = rsa_private.public_key()
    assert RFC8332PublicKey.new256(pub).type() == "rsa-sha2-256"
    assert RFC8332PublicKey.new512(pub).type() == "rsa-sha2-512"


def test_rsa_marshal_matches_openssh(rsa_private):
    pub = rsa_private.public_key()
    assert RFC8332PublicKey.new512(pub).marshal() == _openssh_wire(pub)
    assert RFC8332PublicKey.new256(pub).marshal() == _openssh_wire(pub)


@pytest.mark.parametrize(
    "fmt, digest",
    [("rsa-sha2-512", hashes.SHA512), ("rsa-sha2-256", hashes.SHA256), ("ssh-rsa", hashes.SHA1)],
)
def test_rsa_verify_accepts_valid(rsa_private, fmt, digest):
    data = b"message to sign"
    blob = rsa_private.sign(data, padding.PKCS1v15(), digest())
    key = RFC8332PublicKey.new512(rsa_private.public_key())
    assert key.verify(data, Signature(fmt, blob)) is None


def test_rsa_verify_rejects_tampered(rsa_private):
    blob = rsa_private.sign(b"original", padding.PKCS1v15(), hashes.SHA512())
    key = RFC8332PublicKey.new512(rsa_private.public_key())
    with pytest.raises(InvalidSignature):
        key.verify(b"altered", Signature("rsa-sha2-512", blob))


def test_rsa_verify_rejects_unknown_format(rsa_private):
    blob = rsa_private.sign(b"data", padding.PKCS1v15(), hashes.SHA512())
    key = RFC8332PublicKey.new512(rsa_private.public_key())
    with pytest.raises(ValueError):
        key.verify(b"data", Signature("ecdsa-sha2-nistp256", blob))


@pytest.mark.parametrize(
    "curve, name, digest",
    [
        (ec.SECP256R1(), "ecdsa-sha2-nistp256", hashes.SHA256),
        (ec.SECP384R1(), "ecdsa-sha2-nistp384", hashes.SHA384),
        (ec.SECP521R1(), "ecdsa-sha2-nistp521", hashes.SHA512),
    ],
)
def test_ecdsa_key_round_trip(curve, name, digest):
    private = ec.generate_private_key(curve)
    key = ecdsa_public_key(private.public_key())
    assert key.type() == name
    assert key.marshal() == _openssh_wire(private.public_key())

    data = b"payload"
    r, s = decode_dss_signature(private.sign(data, ec.ECDSA(digest())))
    sig = Signature(key.type(), ecdsa_signature_blob(r, s))
    assert key.verify(data, sig) is None
    with pytest.raises(InvalidSignature):
        key.verify(b"other payload", sig)


def test_ecdsa_verify_rejects_wrong_format():
    private = ec.generate_private_key(ec.SECP256R1())
    key = ECDSAPublicKey(private.public_key())
    r, s = decode_dss_signature(private.sign(b"x", ec.ECDSA(hashes.SHA256())))
    with pytest.raises(ValueError):
        key.verify(b"x", Signature("rsa-sha2-512", ecdsa_signature_blob(r, s)))


def test_ecdsa_verify_rejects_trailing_data():
    private = ec.generate_private_key(ec.SECP256R1())
    key = ECDSAPublicKey(private.public_key())
    r, s = decode_dss_signature(private.sign(b"x", ec.ECDSA(hashes.SHA256())))
    blob = ecdsa_signature_blob(r, s) + b"\x00"
    with pytest.raises(ValueError):
        key.verify(b"x", Signature(key.type(), blob))


def test_ecdsa_unsupported_curve():
    private = ec.generate_private_key(ec.SECP256K1())
    with pytest.raises(UnsupportedKeyType):
        ecdsa_public_key(private.public_key())


def test_ecdsa_public_key_rejects_rsa(rsa_private):
    with pytest.raises(UnsupportedKeyType):
        ecdsa_public_key(rsa_private.public_key())