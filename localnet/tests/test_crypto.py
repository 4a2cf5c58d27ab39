"""Tests for staking identities."""

import stat

import pytest
from localnet.crypto import (
    NODE_ID_PREFIX,
    decode_pem,
    encode_pem,
    generate_staking_keypair,
    load_staking_pair,
    node_id_from_cert,
    node_id_from_public_key,
    parse_staking_cert,
    parse_staking_key,
    save_staking_files,
)
from localnet.crypto.keys import CERT_PEM_LABEL, KEY_PEM_LABEL


def test_keypair_generation():
    """Test Ed25519 staking keypair generation."""
    keypair = generate_staking_keypair()
    assert keypair.private_key is not None
    assert keypair.public_key is not None
    assert keypair.key_pem.startswith(f"-----BEGIN {KEY_PEM_LABEL}-----")
    assert keypair.cert_pem.startswith(f"-----BEGIN {CERT_PEM_LABEL}-----")


def test_seeded_keypair_is_deterministic():
    first = generate_staking_keypair(seed=b"node-0")
    second = generate_staking_keypair(seed=b"node-0")
    other = generate_staking_keypair(seed=b"node-1")

    assert bytes(first.public_key) == bytes(second.public_key)
    assert first.cert_pem == second.cert_pem
    assert bytes(first.public_key) != bytes(other.public_key)


def test_pem_round_trip():
    data = bytes(range(96))
    pem = encode_pem("TEST", data)

    assert decode_pem("TEST", pem) == data

    # Wrong label
    with pytest.raises(ValueError):
        decode_pem("OTHER", pem)

    # Not PEM at all
    with pytest.raises(ValueError):
        decode_pem("TEST", "nonempty")


def test_load_staking_pair():
    """Test that a key and its certificate load together."""
    keypair = generate_staking_keypair()

    loaded = load_staking_pair(keypair.key_pem, keypair.cert_pem)
    assert bytes(loaded.public_key) == bytes(keypair.public_key)

    # Certificate of another identity
    other = generate_staking_keypair()
    with pytest.raises(ValueError):
        load_staking_pair(keypair.key_pem, other.cert_pem)


def test_tampered_certificate_is_rejected():
    keypair = generate_staking_keypair()
    raw = bytearray(decode_pem(CERT_PEM_LABEL, keypair.cert_pem))
    raw[-1] ^= 0xFF

    with pytest.raises(ValueError):
        parse_staking_cert(encode_pem(CERT_PEM_LABEL, bytes(raw)))


def test_wrong_sizes_are_rejected():
    with pytest.raises(ValueError):
        parse_staking_key(encode_pem(KEY_PEM_LABEL, b"short"))
    with pytest.raises(ValueError):
        parse_staking_cert(encode_pem(CERT_PEM_LABEL, b"short"))


def test_node_id():
    """Test node ID derivation from a public key and from a certificate."""
    keypair = generate_staking_keypair()
    node_id = node_id_from_public_key(keypair.public_key)

    assert node_id.startswith(NODE_ID_PREFIX)
    # 20-byte digest, hex encoded
    assert len(node_id) == len(NODE_ID_PREFIX) + 40
    assert node_id_from_cert(keypair.cert_pem) == node_id
    assert node_id_from_public_key(generate_staking_keypair().public_key) != node_id


def test_save_staking_files(tmp_path):
    keypair = generate_staking_keypair()

    key_path, cert_path = save_staking_files(keypair, tmp_path / "node")

    assert key_path.read_text() == keypair.key_pem
    assert cert_path.read_text() == keypair.cert_pem
    assert stat.S_IMODE(key_path.stat().st_mode) == 0o600
