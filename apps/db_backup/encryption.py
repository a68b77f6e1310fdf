"""
Compression and encryption utilities for database dumps.

Dumps are compressed first, then encrypted, following the pattern:
Dump -> Gzip Compression (<name>.gz) -> Fernet Encryption (in place) -> Storage

Compression consumes the original file. Encryption rewrites the file in place
and keeps its name, so remote keys and metadata stay the same whether or not
a dump is encrypted.
"""

import gzip
import logging
import os
from pathlib import Path
from typing import Optional, Tuple

from cryptography.fernet import Fernet

from .exceptions import CompressionError, ConfigurationError

logger = logging.getLogger(__name__)

COMPRESSED_SUFFIX = ".gz"

CHUNK_SIZE = 1024 * 1024  # 1MB chunks


def get_fernet(key) -> Fernet:
    """
    Build a Fernet cipher from the configured key.

    The key should be a 32-byte URL-safe base64-encoded key.
    Generate a new key with: Fernet.generate_key()

    Raises:
        ConfigurationError: If the key is missing or malformed
    """
    if not key:
        raise ConfigurationError(
            "DB_BACKUP['ENCRYPTION_KEY'] is not configured. "
            "Generate a key with: from cryptography.fernet import Fernet; Fernet.generate_key()"
        )

    if isinstance(key, str):
        key = key.encode("utf-8")

    try:
        return Fernet(key)
    except (ValueError, TypeError) as e:
        raise ConfigurationError(f"DB_BACKUP['ENCRYPTION_KEY'] is not a valid Fernet key: {e}") from e


def compress_file(input_path: str) -> Tuple[str, int, int]:
    """
    Compress a file with gzip level 9, replacing the original.

    After success the original file no longer exists and its compressed form
    lives at input_path + '.gz'.

    Args:
        input_path: Path to the file to compress

    Returns:
        Tuple of (output_path, original_size, compressed_size)

    Raises:
        CompressionError: If compression fails
    """
    input_file = Path(input_path)
    output_file = Path(f"{input_path}{COMPRESSED_SUFFIX}")

    if not input_file.is_file():
        raise CompressionError(f"Input file not found: {input_path}")

    try:
        original_size = input_file.stat().st_size

        with open(input_file, "rb") as f_in:
            with gzip.open(output_file, "wb", compresslevel=9) as f_out:
                while True:
                    chunk = f_in.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    f_out.write(chunk)

        compressed_size = output_file.stat().st_size
        input_file.unlink()

    except OSError as e:
        logger.error(f"Failed to compress {input_path}: {e}")
        output_file.unlink(missing_ok=True)
        raise CompressionError(f"Compression failed: {e}") from e

    compression_ratio = (1 - compressed_size / original_size) * 100 if original_size > 0 else 0
    logger.info(
        f"Compressed {input_path} -> {output_file}: "
        f"{original_size} bytes -> {compressed_size} bytes "
        f"({compression_ratio:.1f}% reduction)"
    )

    return str(output_file), original_size, compressed_size


def encrypt_file(path: str, key) -> bool:
    """
    Encrypt a file in place with Fernet (AES-128-CBC with HMAC-SHA256).

    The ciphertext is written to a sibling temporary file which then replaces
    the original, so a failure never leaves a half-written dump behind.

    Args:
        path: Path to the file to encrypt
        key: Fernet key (str or bytes)

    Returns:
        True if encryption succeeded, False otherwise
    """
    temp_path = f"{path}.encrypting"

    try:
        fernet = get_fernet(key)

        with open(path, "rb") as f_in:
            plaintext = f_in.read()

        ciphertext = fernet.encrypt(plaintext)

        with open(temp_path, "wb") as f_out:
            f_out.write(ciphertext)

        os.replace(temp_path, path)

    except (OSError, ConfigurationError) as e:
        logger.error(f"Failed to encrypt {path}: {e}")
        Path(temp_path).unlink(missing_ok=True)
        return False

    logger.info(f"Encrypted {path} in place")
    return True


class Encryptor:
    """Callable encrypting a dump in place with a fixed key."""

    def __init__(self, key: Optional[str]):
        self.key = key

    def __call__(self, path: str) -> bool:
        return encrypt_file(path, self.key)
