"""An SSH signer whose private key lives in Azure Key Vault."""

from __future__ import annotations

import hashlib
from enum import Enum
from typing import Any, Union

from cryptography.hazmat.primitives.asymmetric import ec, rsa

from cloudssh.errors import UnsupportedKeyType
from cloudssh.sshutil import (
    ECDSAPublicKey,
    RFC8332PublicKey,
    Signature,
    ecdsa_public_key,
    ecdsa_signature_blob,
)

SshPublicKey = Union[RFC8332PublicKey, ECDSAPublicKey]

_EC_KEY_TYPES = ("EC", "EC-HSM")
_RSA_KEY_TYPES = ("RSA", "RSA-HSM")


class SignatureAlgorithm(str, Enum):
    """Key Vault signature algorithms used for SSH signing."""

    ES256 = "ES256"
    ES384 = "ES384"
    ES512 = "ES512"
    RS256 = "RS256"
    RS512 = "RS512"


_CURVES = {
    "P-256": (ec.SECP256R1, SignatureAlgorithm.ES256),
    "P-384": (ec.SECP384R1, SignatureAlgorithm.ES384),
    "P-521": (ec.SECP521R1, SignatureAlgorithm.ES512),
}

_DIGESTS = {
    SignatureAlgorithm.ES256: hashlib.sha256,
    SignatureAlgorithm.ES384: hashlib.sha384,
    SignatureAlgorithm.ES512: hashlib.sha512,
    SignatureAlgorithm.RS256: hashlib.sha256,
    SignatureAlgorithm.RS512: hashlib.sha512,
}

_ECDSA_ALGORITHMS = (
    SignatureAlgorithm.ES256,
    SignatureAlgorithm.ES384,
    SignatureAlgorithm.ES512,
)
_RSA_ALGORITHMS = (SignatureAlgorithm.RS256, SignatureAlgorithm.RS512)


def _value(field: Any) -> str:
    return field.value if isinstance(field, Enum) else str(field)


class KvSigner:
    """Signs SSH data with a Key Vault key.

    ``client`` provides ``get_key(name, version)``, returning an object whose
    ``key`` attribute is a JSON web key (``kty``, ``crv``, ``x``, ``y``, ``n``,
    ``e``), and ``sign(name, version, algorithm, digest)``, returning the raw
    signature bytes.
    """

    def __init__(self, client: Any, key_name: str, key_version: str) -> None:
        self.client = client
        self.key_name = key_name
        self.key_version = key_version

        jwk = client.get_key(key_name, key_version).key
        kty = _value(jwk.kty)

        if kty in _EC_KEY_TYPES:
            crv = _value(jwk.crv)
            try:
                curve, self.sig_algo = _CURVES[crv]
            except KeyError:
                raise ValueError(f"unsupported key crv {crv}") from None
            numbers = ec.EllipticCurvePublicNumbers(
                int.from_bytes(jwk.x, "big"), int.from_bytes(jwk.y, "big"), curve()
            )
            self._public_key: SshPublicKey = ecdsa_public_key(numbers.public_key())
        elif kty in _RSA_KEY_TYPES:
            numbers = rsa.RSAPublicNumbers(
                int.from_bytes(jwk.e, "big"), int.from_bytes(jwk.n, "big")
            )
            # Key Vault RSA keys are assumed to support rsa-sha2-512.
            self._public_key = RFC8332PublicKey.new512(numbers.public_key())
            self.sig_algo = SignatureAlgorithm.RS512
        else:
            raise UnsupportedKeyType(kty)

    def public_key(self) -> SshPublicKey:
        """Return the SSH public key of the Key Vault key."""
        return self._public_key

    def sign(self, data: bytes) -> Signature:
        """Hash ``data`` with the key's digest, sign it in Key Vault and return an SSH signature."""
        digest = _DIGESTS.get(self.sig_algo)
        if digest is None:
            raise ValueError(f"unsupported signature algo: {_value(self.sig_algo)}")

        result = bytes(
            self.client.sign(
                self.key_name, self.key_version, self.sig_algo, digest(data).digest()
            )
        )

        if self.sig_algo in _ECDSA_ALGORITHMS:
            # Key Vault returns r and s concatenated, each taking half the bytes.
            half = len(result) // 2
            r = int.from_bytes(result[:half], "big")
            s = int.from_bytes(result[half:], "big")
            blob = ecdsa_signature_blob(r, s)
        elif self.sig_algo in _RSA_ALGORITHMS:
            blob = result
        else:
            raise ValueError(f"unsupported signature algo: {_value(self.sig_algo)}")

        return Signature(format=self._public_key.type(), blob=blob)