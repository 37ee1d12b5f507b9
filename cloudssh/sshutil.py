"""SSH wire encoding and public keys for RSA (RFC 8332) and ECDSA (RFC 5656)."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Protocol, Union

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec, padding, rsa
from cryptography.hazmat.primitives.asymmetric.utils import encode_dss_signature
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from cloudssh.errors import UnsupportedKeyType

KEY_ALGO_RSA = "ssh-rsa"
KEY_ALGO_RSA_SHA256 = "rsa-sha2-256"
KEY_ALGO_RSA_SHA512 = "rsa-sha2-512"

_RSA_HASHES = {
    KEY_ALGO_RSA: hashes.SHA1,
    KEY_ALGO_RSA_SHA256: hashes.SHA256,
    KEY_ALGO_RSA_SHA512: hashes.SHA512,
}

# curve name -> (SSH curve identifier, digest)
_ECDSA_CURVES = {
    "secp256r1": ("nistp256", hashes.SHA256),
    "secp384r1": ("nistp384", hashes.SHA384),
    "secp521r1": ("nistp521", hashes.SHA512),
}


@dataclass(frozen=True)
class Signature:
    """An SSH signature: the algorithm name and the encoded signature blob."""

    format: str
    blob: bytes


class _PublicKey(Protocol):
    def type(self) -> str: ...

    def marshal(self) -> bytes: ...

    def verify(self, data: bytes, signature: Signature) -> None: ...


def encode_string(data: Union[bytes, str]) -> bytes:
    """Encode a byte string as an SSH ``string``: uint32 length then the bytes."""
    if isinstance(data, str):
        data = data.encode()
    return struct.pack(">I", len(data)) + data


def encode_mpint(value: int) -> bytes:
    """Encode an integer as an SSH ``mpint`` (RFC 4251 section 5)."""
    if value == 0:
        return encode_string(b"")
    magnitude = value if value > 0 else ~value
    length = (magnitude.bit_length() + 8) // 8
    return encode_string(value.to_bytes(length, "big", signed=True))


def _read_string(buf: bytes, offset: int) -> tuple[bytes, int]:
    if len(buf) - offset < 4:
        raise ValueError("ssh: short read")
    (length,) = struct.unpack_from(">I", buf, offset)
    start = offset + 4
    end = start + length
    if end > len(buf):
        raise ValueError("ssh: short read")
    return buf[start:end], end


def _read_mpint(buf: bytes, offset: int) -> tuple[int, int]:
    data, offset = _read_string(buf, offset)
    return int.from_bytes(data, "big", signed=True), offset


def ecdsa_signature_blob(r: int, s: int) -> bytes:
    """Encode an ECDSA signature as SSH expects it (RFC 5656 section 3.1.2)."""
    return encode_mpint(r) + encode_mpint(s)


@dataclass(frozen=True)
class RFC8332PublicKey:
    """An RSA public key advertised as rsa-sha2-256 or rsa-sha2-512."""

    public_key: rsa.RSAPublicKey
    algorithm: str

    def __post_init__(self) -> None:
        if self.algorithm not in (KEY_ALGO_RSA_SHA256, KEY_ALGO_RSA_SHA512):
            raise UnsupportedKeyType(self.algorithm)

    @classmethod
    def new256(cls, public_key: rsa.RSAPublicKey) -> "RFC8332PublicKey":
        """Wrap an RSA key with the rsa-sha2-256 algorithm."""
        return cls(public_key, KEY_ALGO_RSA_SHA256)

    @classmethod
    def new512(cls, public_key: rsa.RSAPublicKey) -> "RFC8332PublicKey":
        """Wrap an RSA key with the rsa-sha2-512 algorithm."""
        return cls(public_key, KEY_ALGO_RSA_SHA512)

    def type(self) -> str:
        """Return the public key algorithm name."""
        return self.algorithm

    def marshal(self) -> bytes:
        """Serialize the key in the SSH wire format (RFC 8332 section 3)."""
        numbers = self.public_key.public_numbers()
        return encode_string(KEY_ALGO_RSA) + encode_mpint(numbers.e) + encode_mpint(numbers.n)

    def verify(self, data: bytes, signature: Signature) -> None:
        """Check a signature; raise InvalidSignature or ValueError if it does not hold."""
        digest = _RSA_HASHES.get(signature.format)
        if digest is None:
            raise ValueError(
                f"ssh: signature type {signature.format} for key type {KEY_ALGO_RSA}"
            )
        self.public_key.verify(signature.blob, data, padding.PKCS1v15(), digest())


@dataclass(frozen=True)
class ECDSAPublicKey:
    """An ECDSA public key on one of the NIST curves SSH supports."""

    public_key: ec.EllipticCurvePublicKey

    def __post_init__(self) -> None:
        if self.public_key.curve.name not in _ECDSA_CURVES:
            raise UnsupportedKeyType(self.public_key.curve.name)

    @property
    def _curve_id(self) -> str:
        return _ECDSA_CURVES[self.public_key.curve.name][0]

    def type(self) -> str:
        """Return the public key algorithm name."""
        return f"ecdsa-sha2-{self._curve_id}"

    def marshal(self) -> bytes:
        """Serialize the key in the SSH wire format (RFC 5656 section 3.1)."""
        point = self.public_key.public_bytes(Encoding.X962, PublicFormat.UncompressedPoint)
        return encode_string(self.type()) + encode_string(self._curve_id) + encode_string(point)

    def verify(self, data: bytes, signature: Signature) -> None:
        """Check a signature; raise InvalidSignature or ValueError if it does not hold."""
        if signature.format != self.type():
            raise ValueError(
                f"ssh: signature type {signature.format} for key type {self.type()}"
            )
        r, offset = _read_mpint(signature.blob, 0)
        s, offset = _read_mpint(signature.blob, offset)
        if offset != len(signature.blob):
            raise ValueError("ssh: trailing data in signature")
        digest = _ECDSA_CURVES[self.public_key.curve.name][1]
        self.public_key.verify(encode_dss_signature(r, s), data, ec.ECDSA(digest()))


def ecdsa_public_key(public_key: ec.EllipticCurvePublicKey) -> ECDSAPublicKey:
    """Wrap an ECDSA key as an SSH public key, rejecting unsupported curves."""
    if not isinstance(public_key, ec.EllipticCurvePublicKey):
        raise UnsupportedKeyType(type(public_key).__name__)
    return ECDSAPublicKey(public_key)