"""
Cryptographic operations for Aegis Vault.

This module provides the cryptographic primitives for:
- Master password hashing and verification using PBKDF2-HMAC-SHA256
- Session key derivation from the master password
- Field-level encryption using AES-256-CBC with a random IV per field
- Best-effort erasure of sensitive data from memory

Every credential field is stored as Base64(IV || ciphertext), so each
encrypted value is self-contained and can be decrypted on its own.
"""

import os
import base64
import binascii
import ctypes
import hmac
from typing import Tuple

from cryptography.hazmat.primitives import hashes, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

# ==============================================================================
# CRYPTOGRAPHIC CONSTANTS
# ==============================================================================

# Size of the per-user salt in bytes (128 bits)
SALT_SIZE = 16

# Size of derived keys and password hashes in bytes (256 bits for AES-256)
KEY_SIZE = 32

# PBKDF2 iteration count shared by hashing and key derivation
PBKDF2_ITERATIONS = 100000

# AES block size in bytes; also the IV length for CBC mode
IV_SIZE = 16

# Context string binding the derived session key to field encryption
ENCRYPTION_KEY_INFO = b"aegis-vault-encryption"


class CryptoError(Exception):
    """Raised when a stored field cannot be decoded or decrypted."""


# ==============================================================================
# PASSWORD HASHING
# ==============================================================================

def _pbkdf2(password: str, salt: bytes) -> bytes:
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_SIZE,
        salt=salt,
        iterations=PBKDF2_ITERATIONS,
    )
    return kdf.derive(password.encode("utf-8"))


def generate_salt() -> bytes:
    """Return SALT_SIZE bytes from the operating system CSPRNG."""
    return os.urandom(SALT_SIZE)


def hash_master_password(password: str) -> Tuple[str, bytes]:
    """
    Hash a master password with a freshly generated salt.

    Args:
        password (str): The user's master password

    Returns:
        Tuple[str, bytes]: A tuple containing:
            - hash: Base64-encoded 32-byte PBKDF2-HMAC-SHA256 output
            - salt: The random 16-byte salt used

    Raises:
        ValueError: If password is empty
    """
    if not password:
        raise ValueError("password must not be empty")

    salt = generate_salt()
    digest = _pbkdf2(password, salt)
    return base64.b64encode(digest).decode("ascii"), salt


def verify_master_password(password: str, stored_hash: str, salt: bytes) -> bool:
    """
    Check a candidate master password against a stored hash.

    The comparison is done in constant time so that response timing does
    not reveal how much of the hash matched.

    Args:
        password (str): Candidate master password
        stored_hash (str): Base64-encoded hash from the Users table
        salt (bytes): Salt stored alongside the hash

    Returns:
        bool: True if the password produces the stored hash

    Raises:
        ValueError: If password or stored_hash is empty, or salt is None
    """
    if not password:
        raise ValueError("password must not be empty")
    if not stored_hash:
        raise ValueError("stored_hash must not be empty")
    if salt is None:
        raise ValueError("salt must not be None")

    try:
        expected = base64.b64decode(stored_hash, validate=True)
    except (binascii.Error, ValueError):
        return False

    return hmac.compare_digest(_pbkdf2(password, salt), expected)


# ==============================================================================
# KEY DERIVATION
# ==============================================================================

def derive_key_from_password(password: str, salt: bytes) -> bytes:
    """
    Derive the 32-byte session encryption key for a user's vault.

    PBKDF2 runs with the same salt as the stored verifier, then HKDF
    separates the output so the value in the Users table can never be used
    as the vault key.

    Args:
        password (str): The user's master password
        salt (bytes): The user's salt from the master database

    Returns:
        bytes: KEY_SIZE bytes suitable for AES-256

    Raises:
        ValueError: If password is empty or salt is None
    """
    if not password:
        raise ValueError("password must not be empty")
    if salt is None:
        raise ValueError("salt must not be None")

    hkdf = HKDF(
        algorithm=hashes.SHA256(),
        length=KEY_SIZE,
        salt=None,  # PBKDF2 already consumed the salt
        info=ENCRYPTION_KEY_INFO,
    )
    return hkdf.derive(_pbkdf2(password, salt))


# ==============================================================================
# FIELD ENCRYPTION / DECRYPTION
# ==============================================================================

def encrypt_field(plaintext: str, key: bytes) -> str:
    """
    Encrypt a single string field with AES-256-CBC.

    A new random IV is generated for every call and prepended to the
    ciphertext, so encrypting the same value twice yields different output.

    Args:
        plaintext (str): Value to encrypt (may be empty)
        key (bytes): 32-byte session key

    Returns:
        str: Base64(IV || ciphertext)

    Raises:
        ValueError: If plaintext or key is None
    """
    if plaintext is None:
        raise ValueError("plaintext must not be None")
    if key is None:
        raise ValueError("key must not be None")

    iv = os.urandom(IV_SIZE)

    padder = padding.PKCS7(algorithms.AES.block_size).padder()
    padded = padder.update(plaintext.encode("utf-8")) + padder.finalize()

    encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
    ciphertext = encryptor.update(padded) + encryptor.finalize()

    return base64.b64encode(iv + ciphertext).decode("ascii")


def decrypt_field(ciphertext_b64: str, key: bytes) -> str:
    """
    Decrypt a field produced by encrypt_field().

    Args:
        ciphertext_b64 (str): Base64(IV || ciphertext)
        key (bytes): 32-byte session key

    Returns:
        str: The original plaintext

    Raises:
        ValueError: If ciphertext_b64 is empty or key is None
        CryptoError: If the input is malformed or the key is wrong
    """
    if not ciphertext_b64:
        raise ValueError("ciphertext must not be empty")
    if key is None:
        raise ValueError("key must not be None")

    try:
        raw = base64.b64decode(ciphertext_b64, validate=True)
    except (binascii.Error, ValueError) as e:
        raise CryptoError(f"Invalid Base64 ciphertext: {e}") from e

    # Need the IV plus at least one full block
    if len(raw) < IV_SIZE * 2 or len(raw) % IV_SIZE:
        raise CryptoError("Ciphertext has an invalid length")

    iv, ciphertext = raw[:IV_SIZE], raw[IV_SIZE:]

    decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
    padded = decryptor.update(ciphertext) + decryptor.finalize()

    try:
        unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
        data = unpadder.update(padded) + unpadder.finalize()
        return data.decode("utf-8")
    except (ValueError, UnicodeDecodeError) as e:
        # Bad padding or garbage bytes almost always mean the wrong key
        raise CryptoError("Unable to decrypt field (wrong key or corrupted data)") from e


# ==============================================================================
# SECURE MEMORY MANAGEMENT
# ==============================================================================

def secure_erase_bytes(data: bytearray) -> None:
    """Zero a mutable bytearray in place, including at the C level."""
    if not data:
        return

    for i in range(len(data)):
        data[i] = 0

    ctypes.memset(
        ctypes.addressof(ctypes.c_char.from_buffer(data)),
        0,
        len(data)
    )


def secure_erase_key(key: bytearray) -> None:
    """
    Zero session key material in place.

    Only a bytearray can be cleared; immutable bytes are left untouched, so
    session keys should be held as bytearrays.

    Raises:
        TypeError: If key is not None and not a bytearray
    """
    if key is None:
        return
    if not isinstance(key, bytearray):
        raise TypeError("key must be a bytearray to be erased in place")

    secure_erase_bytes(key)
