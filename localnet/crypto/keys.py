"""Staking key generation and PEM armoring for Ed25519 identities."""

import base64
import hashlib
import textwrap
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import nacl.signing

KEY_PEM_LABEL = "STAKING KEY"
CERT_PEM_LABEL = "STAKING CERTIFICATE"


@dataclass
class StakingKeyPair:
    """Ed25519 staking identity of a node."""
    private_key: nacl.signing.SigningKey
    public_key: nacl.signing.VerifyKey

    @property
    def key_pem(self) -> str:
        """Get the PEM-armored private key."""
        return encode_pem(KEY_PEM_LABEL, bytes(self.private_key))

    @property
    def cert_pem(self) -> str:
        """Get the PEM-armored self-signed certificate."""
        # Imported here: staking builds on this module
        from .staking import make_certificate
        return encode_pem(CERT_PEM_LABEL, make_certificate(self.private_key))


def generate_staking_keypair(seed: Optional[bytes] = None) -> StakingKeyPair:
    """
    Generate a new Ed25519 staking key pair.

    Args:
        seed: Optional seed; the same seed always yields the same identity

    Returns:
        StakingKeyPair: New staking identity
    """
    if seed is None:
        private_key = nacl.signing.SigningKey.generate()
    else:
        private_key = nacl.signing.SigningKey(hashlib.sha256(seed).digest())
    return StakingKeyPair(private_key=private_key, public_key=private_key.verify_key)


def encode_pem(label: str, data: bytes) -> str:
    """Armor raw bytes in a PEM block."""
    body = "\n".join(textwrap.wrap(base64.b64encode(data).decode('utf-8'), 64))
    return f"-----BEGIN {label}-----\n{body}\n-----END {label}-----\n"


def decode_pem(label: str, pem: str) -> bytes:
    """
    Strip PEM armor and decode the body.

    Args:
        label: Expected block label
        pem: PEM text

    Returns:
        Decoded body bytes

    Raises:
        ValueError: If the armor or the base64 body is malformed
    """
    lines = [line.strip() for line in pem.strip().splitlines() if line.strip()]
    if len(lines) < 3:
        raise ValueError(f"malformed {label.lower()}: too short")
    if lines[0] != f"-----BEGIN {label}-----" or lines[-1] != f"-----END {label}-----":
        raise ValueError(f"malformed {label.lower()}: missing PEM armor")

    # binascii.Error is a ValueError
    return base64.b64decode(''.join(lines[1:-1]), validate=True)


def save_staking_files(keypair: StakingKeyPair, directory: str) -> tuple[Path, Path]:
    """
    Save a staking identity as key and certificate files.

    Args:
        keypair: Staking identity to save
        directory: Target directory (created if missing)

    Returns:
        Tuple of (key_path, cert_path)
    """
    return write_staking_files(keypair.key_pem, keypair.cert_pem, directory)


def write_staking_files(key_pem: str, cert_pem: str, directory: str) -> tuple[Path, Path]:
    """Write already-armored staking material into a directory."""
    base = Path(directory)
    base.mkdir(parents=True, exist_ok=True)

    key_path = base / 'staking.key'
    cert_path = base / 'staking.crt'

    with open(key_path, 'w') as f:
        f.write(key_pem)
    with open(cert_path, 'w') as f:
        f.write(cert_pem)

    # Restrict private key permissions
    key_path.chmod(0o600)

    return key_path, cert_path
