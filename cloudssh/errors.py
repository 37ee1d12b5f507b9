"""Exceptions raised while building SSH signers from cloud-held keys."""

from __future__ import annotations

from collections.abc import Iterable


def _format_list(items: Iterable[str]) -> str:
    return "[" + " ".join(str(item) for item in items) + "]"


class UnsupportedKeyType(Exception):
    """Raised when a key's type cannot be used for SSH signing."""

    def __init__(self, key_type: str) -> None:
        self.key_type = key_type
        super().__init__(f"unsupported key type: {key_type}")


class KmsKeyLacksSupportedAlgorithms(Exception):
    """Raised when a KMS key offers none of the signing algorithms SSH needs."""

    def __init__(
        self,
        key_id: str,
        key_signing_algorithms: Iterable[str],
        required_signing_algorithms: Iterable[str],
    ) -> None:
        self.key_id = key_id
        self.key_signing_algorithms = list(key_signing_algorithms)
        self.required_signing_algorithms = list(required_signing_algorithms)
        super().__init__(
            f"KMS Keypair {key_id} does not support required algorithms. "
            f"Required: {_format_list(self.key_signing_algorithms)}; "
            f"supported: {_format_list(self.required_signing_algorithms)}"
        )