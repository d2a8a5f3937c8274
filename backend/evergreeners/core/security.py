"""GitHubアクセストークン暗号化モジュール。

cryptographyによるAES-256-GCMで、accountsテーブルに保存する
OAuthアクセストークンを暗号化・復号する。
"""

import base64
import os

from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from evergreeners.config import settings

_NONCE_SIZE = 12


def _get_aes_key() -> bytes:
    """settings.ENCRYPTION_KEY から32バイトのAES鍵を取得する。

    ENCRYPTION_KEY は64文字のhex文字列（32バイト相当）を想定。

    Returns:
        32バイトの鍵。
    """
    return bytes.fromhex(settings.ENCRYPTION_KEY)


def encrypt_token(plaintext: str) -> str:
    """平文トークンをAES-256-GCMで暗号化し、base64エンコードして返す。

    出力形式: base64(nonce + ciphertext + tag)

    Args:
        plaintext: 暗号化する平文文字列。

    Returns:
        base64エンコードされた暗号文。
    """
    aesgcm = AESGCM(_get_aes_key())
    nonce = os.urandom(_NONCE_SIZE)
    ciphertext: bytes = aesgcm.encrypt(nonce, plaintext.encode("utf-8"), None)
    return base64.urlsafe_b64encode(nonce + ciphertext).decode("ascii")


def decrypt_token(encrypted: str) -> str:
    """base64エンコードされた暗号文を復号する。

    Args:
        encrypted: encrypt_token() で生成されたbase64文字列。

    Returns:
        復号された平文文字列。

    Raises:
        cryptography.exceptions.InvalidTag: 改ざん・鍵不一致の場合。
        ValueError: base64として不正な場合。
    """
    aesgcm = AESGCM(_get_aes_key())
    raw: bytes = base64.urlsafe_b64decode(encrypted)
    nonce = raw[:_NONCE_SIZE]
    ciphertext = raw[_NONCE_SIZE:]
    plaintext_bytes: bytes = aesgcm.decrypt(nonce, ciphertext, None)
    return plaintext_bytes.decode("utf-8")
