"""SSH signers backed by AWS KMS and Azure Key Vault keys, with SSH wire helpers."""

__version__ = "0.1.0"
__all__ = ["errors", "sshutil", "kms", "keyvault"]