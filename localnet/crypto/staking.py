"""Staking certificates, key/cert pair validation and node IDs."""

import nacl.encoding
import nacl.exceptions
import nacl.hash
import nacl.signing

from .keys import CERT_PEM_LABEL, KEY_PEM_LABEL, StakingKeyPair, decode_pem

NODE_ID_PREFIX = "NodeID-"

_SEED_SIZE = 32
_PUBLIC_KEY_SIZE = 32
_SIGNATURE_SIZE = 64


def make_certificate(private_key: nacl.signing.SigningKey) -> bytes:
    """
    Build a self-signed staking certificate.

    The certificate body is the public key followed by the signature
    of the private key over that public key.

    Args:
        private_key: Ed25519 private key

    Returns:
        Raw certificate bytes
    """
    public_key = bytes(private_key.verify_key)
    signed = private_key.sign(public_key)
    return public_key + signed.signature


def parse_staking_key(key_pem: str) -> nacl.signing.SigningKey:
    """
    Parse a PEM-armored staking key.

    Raises:
        ValueError: If the key is malformed
    """
    raw = decode_pem(KEY_PEM_LABEL, key_pem)
    if len(raw) != _SEED_SIZE:
        raise ValueError(f"staking key must be {_SEED_SIZE} bytes, got {len(raw)}")
    return nacl.signing.SigningKey(raw)


def parse_staking_cert(cert_pem: str) -> nacl.signing.VerifyKey:
    """
    Parse a PEM-armored staking certificate and check its self-signature.

    Returns:
        VerifyKey: The certified public key

    Raises:
        ValueError: If the certificate is malformed or its signature is invalid
    """
    raw = decode_pem(CERT_PEM_LABEL, cert_pem)
    if len(raw) != _PUBLIC_KEY_SIZE + _SIGNATURE_SIZE:
        raise ValueError(f"staking certificate must be {_PUBLIC_KEY_SIZE + _SIGNATURE_SIZE} bytes, got {len(raw)}")

    public_key_bytes = raw[:_PUBLIC_KEY_SIZE]
    signature = raw[_PUBLIC_KEY_SIZE:]
    public_key = nacl.signing.VerifyKey(public_key_bytes)
    try:
        public_key.verify(public_key_bytes, signature)
    except nacl.exceptions.BadSignatureError as e:
        raise ValueError("staking certificate signature is invalid") from e
    return public_key


def load_staking_pair(key_pem: str, cert_pem: str) -> StakingKeyPair:
    """
    Load a staking key and certificate, checking that they belong together.

    Args:
        key_pem: PEM-armored private key
        cert_pem: PEM-armored certificate

    Returns:
        StakingKeyPair

    Raises:
        ValueError: If either part is invalid or they do not match
    """
    private_key = parse_staking_key(key_pem)
    public_key = parse_staking_cert(cert_pem)
    if bytes(private_key.verify_key) != bytes(public_key):
        raise ValueError("staking certificate does not match staking key")
    return StakingKeyPair(private_key=private_key, public_key=public_key)


def node_id_from_public_key(public_key: nacl.signing.VerifyKey) -> str:
    """Derive the node ID of a staking public key."""
    digest = nacl.hash.blake2b(bytes(public_key), digest_size=20, encoder=nacl.encoding.HexEncoder)
    return NODE_ID_PREFIX + digest.decode('utf-8')


def node_id_from_cert(cert_pem: str) -> str:
    """
    Derive the node ID certified by a staking certificate.

    Raises:
        ValueError: If the certificate is invalid
    """
    return node_id_from_public_key(parse_staking_cert(cert_pem))
