"""Staking identity operations for localnet."""

from .keys import StakingKeyPair, generate_staking_keypair, save_staking_files, write_staking_files, encode_pem, decode_pem
from .staking import (
    make_certificate,
    parse_staking_key,
    parse_staking_cert,
    load_staking_pair,
    node_id_from_public_key,
    node_id_from_cert,
    NODE_ID_PREFIX,
)

__all__ = [
    "StakingKeyPair",
    "generate_staking_keypair",
    "save_staking_files",
    "write_staking_files",
    "encode_pem",
    "decode_pem",
    "make_certificate",
    "parse_staking_key",
    "parse_staking_cert",
    "load_staking_pair",
    "node_id_from_public_key",
    "node_id_from_cert",
    "NODE_ID_PREFIX",
]
