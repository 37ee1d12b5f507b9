"""An SSH signer whose private key lives in AWS KMS."""

from __future__ import annotations

import hashlib
from typing import Any, Callable, Union

from cryptography.hazmat.primitives.asymmetric import ec, rsa
from cryptography.hazmat.primitives.asymmetric.utils import decode_dss_signature
from cryptography.hazmat.primitives.serialization import load_der_public_key

from cloudssh.errors import KmsKeyLacksSupportedAlgorithms, UnsupportedKeyType
from cloudssh.sshutil import (
    KEY_ALGO_RSA_SHA256,
    KEY_ALGO_RSA_SHA512,
    ECDSAPublicKey,
    RFC8332PublicKey,
    Signature,
    ecdsa_public_key,
    ecdsa_signature_blob,
)

RSASSA_PKCS1_V1_5_SHA_256 = "RSASSA_PKCS1_V1_5_SHA_256"
RSASSA_PKCS1_V1_5_SHA_512 = "RSASSA_PKCS1_V1_5_SHA_512"
ECDSA_SHA_256 = "ECDSA_SHA_256"
ECDSA_SHA_384 = "ECDSA_SHA_384"
ECDSA_SHA_512 = "ECDSA_SHA_512"

MESSAGE_TYPE_DIGEST = "DIGEST"

_RSA_ALGORITHMS = (RSASSA_PKCS1_V1_5_SHA_256, RSASSA_PKCS1_V1_5_SHA_512)
_ECDSA_ALGORITHMS = (ECDSA_SHA_256, ECDSA_SHA_384, ECDSA_SHA_512)

# SSH key type -> (KMS signing algorithm, digest constructor)
_SIGNING: dict[str, tuple[str, Callable[..., Any]]] = {
    KEY_ALGO_RSA_SHA256: (RSASSA_PKCS1_V1_5_SHA_256, hashlib.sha256),
    KEY_ALGO_RSA_SHA512: (RSASSA_PKCS1_V1_5_SHA_512, hashlib.sha512),
    "ecdsa-sha2-nistp256": (ECDSA_SHA_256, hashlib.sha256),
    "ecdsa-sha2-nistp384": (ECDSA_SHA_384, hashlib.sha384),
    "ecdsa-sha2-nistp521": (ECDSA_SHA_512, hashlib.sha512),
}

SshPublicKey = Union[RFC8332PublicKey, ECDSAPublicKey]


class KmsSigner:
    """Signs SSH data with a KMS asymmetric key.

    ``client`` follows the KMS client interface: ``get_public_key(KeyId=...)``
    and ``sign(KeyId=..., Message=..., MessageType=..., SigningAlgorithm=...,
    DryRun=...)``, each returning a response mapping.
    """

    def __init__(self, client: Any, key_id: str) -> None:
        self.client = client
        self.key_id = key_id

        response = client.get_public_key(KeyId=key_id)
        decoded = load_der_public_key(response["PublicKey"])
        algorithms = list(response.get("SigningAlgorithms", []))

        if isinstance(decoded, rsa.RSAPublicKey):
            if RSASSA_PKCS1_V1_5_SHA_512 in algorithms:
                self._public_key: SshPublicKey = RFC8332PublicKey.new512(decoded)
            elif RSASSA_PKCS1_V1_5_SHA_256 in algorithms:
                self._public_key = RFC8332PublicKey.new256(decoded)
            else:
                raise KmsKeyLacksSupportedAlgorithms(
                    response.get("KeyId", key_id),
                    algorithms,
                    [RSASSA_PKCS1_V1_5_SHA_512, RSASSA_PKCS1_V1_5_SHA_256],
                )
        elif isinstance(decoded, ec.EllipticCurvePublicKey):
            self._public_key = ecdsa_public_key(decoded)
        else:
            raise UnsupportedKeyType(str(response.get("KeySpec", "")))

    def public_key(self) -> SshPublicKey:
        """Return the SSH public key of the KMS key."""
        return self._public_key

    def sign(self, data: bytes) -> Signature:
        """Hash ``data`` with the key's digest, sign it in KMS and return an SSH signature."""
        key_type = self._public_key.type()
        try:
            algorithm, digest = _SIGNING[key_type]
        except KeyError:
            raise UnsupportedKeyType(key_type) from None

        response = self.client.sign(
            KeyId=self.key_id,
            Message=digest(data).digest(),
            MessageType=MESSAGE_TYPE_DIGEST,
            SigningAlgorithm=algorithm,
            DryRun=False,
        )
        signature = response["Signature"]

        if algorithm in _RSA_ALGORITHMS:
            blob = signature
        elif algorithm in _ECDSA_ALGORITHMS:
            # KMS returns a DER-encoded ECDSA-Sig-Value; SSH wants two mpints.
            r, s = decode_dss_signature(signature)
            blob = ecdsa_signature_blob(r, s)
        else:
            raise ValueError(f"unsupported signing algorithm: {algorithm}")

        return Signature(format=key_type, blob=blob)