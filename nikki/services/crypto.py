from __future__ import annotations

import hashlib
import logging
import os
import re
from dataclasses import dataclass

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

logger = logging.getLogger(__name__)

KEY_LENGTH = 32
IV_LENGTH = 16

_HEX = re.compile(r"^[0-9a-fA-F]+$")


@dataclass(frozen=True)
class CipherResult:
    value: str
    degraded: bool = False


def derive_key(secret: str) -> bytes:
    try:
        candidate = bytes.fromhex(secret)
    except ValueError:
        candidate = b""
    if len(candidate) == KEY_LENGTH:
        return candidate
    return hashlib.sha256(str(secret).encode("utf-8")).digest()


def looks_encrypted(value: str) -> bool:
    parts = value.split(":")
    if len(parts) != 2:
        return False
    return all(_HEX.match(part) and len(part) % 2 == 0 for part in parts)


class ContentCipher:
    """AES-256-CBC codec for entry content, stored as ``iv_hex:cipher_hex``.

    Both directions fail open: when encryption or decryption breaks, the input
    is handed back untouched and a warning is logged. Plaintext may therefore
    reach storage if the cipher misbehaves; that is accepted over losing the
    user's entry. Changing the secret leaves older ciphertext unreadable, and
    such values are returned as stored.
    """

    def __init__(self, secret: str):
        if not secret:
            raise ValueError("Encryption secret must not be empty")
        self._key = derive_key(secret)

    def encrypt_result(self, plaintext: str) -> CipherResult:
        if not plaintext:
            return CipherResult("")
        try:
            iv = os.urandom(IV_LENGTH)
            padder = padding.PKCS7(algorithms.AES.block_size).padder()
            padded = padder.update(plaintext.encode("utf-8")) + padder.finalize()
            encryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).encryptor()
            encrypted = encryptor.update(padded) + encryptor.finalize()
        except Exception as exc:
            logger.warning("Encryption failed, storing content as plain text: %s", exc)
            return CipherResult(plaintext, degraded=True)
        return CipherResult(f"{iv.hex()}:{encrypted.hex()}")

    def decrypt_result(self, stored: str) -> CipherResult:
        if not stored:
            return CipherResult("")
        if not looks_encrypted(stored):
            return CipherResult(stored)
        iv_hex, cipher_hex = stored.split(":")
        try:
            iv = bytes.fromhex(iv_hex)
            encrypted = bytes.fromhex(cipher_hex)
            decryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).decryptor()
            padded = decryptor.update(encrypted) + decryptor.finalize()
            unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
            plaintext = unpadder.update(padded) + unpadder.finalize()
            return CipherResult(plaintext.decode("utf-8"))
        except Exception as exc:
            logger.warning("Decryption failed, returning stored value: %s", exc)
            return CipherResult(stored, degraded=True)

    def encrypt(self, plaintext: str) -> str:
        return self.encrypt_result(plaintext).value

    def decrypt(self, stored: str) -> str:
        return self.decrypt_result(stored).value
