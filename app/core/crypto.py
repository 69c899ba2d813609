"""GitHub access token 암호화. AES-GCM(cryptography), 호출마다 새 12바이트 IV."""

import base64
import binascii
import hashlib
import os
from dataclasses import dataclass
from functools import lru_cache

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from app.core.config import settings

IV_SIZE_BYTES = 12
_AES_KEY_SIZES = (16, 24, 32)


class CryptoError(Exception):
    """복호화 실패(키 불일치·변조) 또는 잘못된 입력."""

    pass


@dataclass(frozen=True)
class EncryptedToken:
    """암호문과 IV. 둘 다 base64 문자열이며 항상 함께 저장한다."""

    ciphertext: str
    iv: str


def _derive_key(secret: str) -> bytes:
    """base64로 16/24/32바이트가 나오면 그대로 AES 키로, 아니면 SHA-256 파생 키."""
    try:
        raw = base64.b64decode(secret, validate=True)
    except (binascii.Error, ValueError):
        raw = b""
    if len(raw) in _AES_KEY_SIZES:
        return raw
    return hashlib.sha256(secret.encode("utf-8")).digest()


class TokenCipher:
    """대칭 암호화. encrypt는 (ciphertext, iv) 쌍 반환."""

    def __init__(self, secret: str) -> None:
        if not secret or not secret.strip():
            raise CryptoError("Encryption secret is empty")
        self._aesgcm = AESGCM(_derive_key(secret.strip()))

    def encrypt(self, plaintext: str) -> EncryptedToken:
        iv = os.urandom(IV_SIZE_BYTES)
        ciphertext = self._aesgcm.encrypt(iv, plaintext.encode("utf-8"), None)
        return EncryptedToken(
            ciphertext=base64.b64encode(ciphertext).decode("ascii"),
            iv=base64.b64encode(iv).decode("ascii"),
        )

    def decrypt(self, ciphertext: str, iv: str) -> str:
        try:
            data = self._aesgcm.decrypt(
                base64.b64decode(iv), base64.b64decode(ciphertext), None
            )
        except (InvalidTag, binascii.Error, ValueError) as e:
            raise CryptoError("Failed to decrypt token") from e
        return data.decode("utf-8")


@lru_cache(maxsize=1)
def get_token_cipher() -> TokenCipher:
    """FastAPI Depends용. CRYPTO_KEY로 만든 TokenCipher 싱글톤."""
    return TokenCipher(settings.crypto_key.get_secret_value())
