# cloudssh

SSH signing with private keys that never leave a cloud key management service.
`cloudssh` presents keys held in AWS KMS or Azure Key Vault as SSH signers: it
fetches the public key, builds the matching SSH public key, hashes the data
locally, asks the service to sign the digest, and returns the signature in SSH
wire format.

## Installation

```
pip install cloudssh
```

The only runtime dependency is `cryptography`. The service clients are
supplied by you (see below).

## Supported keys

| Service         | Key types                           | SSH algorithm                                                   |
|-----------------|-------------------------------------|-----------------------------------------------------------------|
| AWS KMS         | RSA                                 | `rsa-sha2-512`, or `rsa-sha2-256` if that is all the key allows |
| AWS KMS         | ECC P-256 / P-384 / P-521           | `ecdsa-sha2-nistp256/384/521`                                   |
| Azure Key Vault | RSA, RSA-HSM                        | `rsa-sha2-512`                                                  |
| Azure Key Vault | EC, EC-HSM on P-256 / P-384 / P-521 | `ecdsa-sha2-nistp256/384/521`                                   |

RSA keys are never presented as legacy `ssh-rsa` (SHA-1);
`cloudssh.sshutil.RFC8332PublicKey` uses the RFC 8332 algorithm names instead.

## Usage

Each signer takes a client object and calls only the methods listed here, so
any object offering them will do.

### AWS KMS

`cloudssh.kms.KmsSigner(client, key_id)` needs a client with:

- `get_public_key(KeyId=...)` returning a mapping with `"PublicKey"` (DER
  bytes), `"SigningAlgorithms"`, and optionally `"KeyId"` and `"KeySpec"`;
- `sign(KeyId=..., Message=..., MessageType="DIGEST", SigningAlgorithm=...,
  DryRun=False)` returning a mapping with `"Signature"`.

This is the shape of the KMS client in the AWS SDK for Python.

```python
from cloudssh.kms import KmsSigner

signer = KmsSigner(kms_client, "alias/my-ssh-key")
public_key = signer.public_key()
print(public_key.type())            # e.g. "rsa-sha2-512"

signature = signer.sign(b"data to sign")
public_key.verify(b"data to sign", signature)
```

### Azure Key Vault

`cloudssh.keyvault.KvSigner(client, key_name, key_version)` needs a client with:

- `get_key(name, version)` returning an object whose `key` attribute is a JSON
  web key with `kty`, `crv`, `x`, `y` (EC) or `n`, `e` (RSA);
- `sign(name, version, algorithm, digest)` returning the raw signature bytes,
  where `algorithm` is a `cloudssh.keyvault.SignatureAlgorithm`
  (`ES256`, `ES384`, `ES512`, `RS256`, `RS512`, a `str` enum).

EC signatures returned by the service as `r` and `s` concatenated are
converted to the SSH encoding.

```python
from cloudssh.keyvault import KvSigner

signer = KvSigner(vault_client, "my-ssh-key", "")
signature = signer.sign(b"data to sign")
print(signature.format)             # e.g. "ecdsa-sha2-nistp256"
```

### Signatures and public keys

`sign()` returns a `cloudssh.sshutil.Signature`, a frozen dataclass with
`format` (the SSH algorithm name) and `blob` (the encoded signature).

Public keys are `RFC8332PublicKey` or `ECDSAPublicKey`, each with:

- `type()`: the SSH algorithm name;
- `marshal()`: the key in SSH wire format;
- `verify(data, signature)`: returns nothing on success, raises
  `cryptography.exceptions.InvalidSignature` or `ValueError` otherwise.

### SSH wire helpers

`cloudssh.sshutil` also has the building blocks the signers use:

- `RFC8332PublicKey.new256(key)` / `RFC8332PublicKey.new512(key)`: wrap an RSA
  public key under the RFC 8332 algorithm names.
- `ecdsa_public_key(key)`: wrap an elliptic-curve public key as an
  `ECDSAPublicKey`; only P-256, P-384 and P-521 are accepted.
- `encode_string(data)`, `encode_mpint(value)`: RFC 4251 wire encodings.
- `ecdsa_signature_blob(r, s)`: the RFC 5656 ECDSA signature blob.

## Errors

- `cloudssh.errors.UnsupportedKeyType`: a key type or curve the signers
  cannot use.
- `cloudssh.errors.KmsKeyLacksSupportedAlgorithms`: a KMS RSA key allows
  neither `RSASSA_PKCS1_V1_5_SHA_512` nor `RSASSA_PKCS1_V1_5_SHA_256`.
- `ValueError`: a Key Vault EC key on a curve other than P-256, P-384 or
  P-521.

## What it does not do

`cloudssh` is a library of signers only. It has no command-line tool, does not
create or authenticate service clients, and is not an SSH client or agent:
handing the public key and signatures to an SSH connection or certificate is
up to the caller.

## Running the tests

```
pip install -e ".[test]"
pytest
```