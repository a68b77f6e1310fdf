"""
Tests for dump compression and encryption.

These tests verify:
1. Gzip compression consumes the original and appends .gz
2. Fernet encryption rewrites the file in place and reports failures as False
3. Encryption key validation
"""

import gzip
import shutil
import tempfile
from pathlib import Path
from unittest.mock import patch

from django.test import SimpleTestCase

from cryptography.fernet import Fernet

from apps.db_backup.encryption import Encryptor, compress_file, encrypt_file, get_fernet
from apps.db_backup.exceptions import CompressionError, ConfigurationError


class EncryptionKeyTests(SimpleTestCase):
    """Test encryption key validation."""

    def test_get_fernet_from_string_key(self):
        key = Fernet.generate_key().decode("utf-8")

        self.assertIsInstance(get_fernet(key), Fernet)

    def test_get_fernet_from_bytes_key(self):
        self.assertIsInstance(get_fernet(Fernet.generate_key()), Fernet)

    def test_missing_key(self):
        with self.assertRaises(ConfigurationError) as context:
            get_fernet(None)
        self.assertIn("not configured", str(context.exception))

    def test_malformed_key(self):
        with self.assertRaises(ConfigurationError) as context:
            get_fernet("not-a-fernet-key")
        self.assertIn("not a valid Fernet key", str(context.exception))


class CompressionTests(SimpleTestCase):
    """Test in-place gzip compression."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_compress_file_consumes_original(self):
        test_file = Path(self.temp_dir) / "dump.sql"
        test_content = b"INSERT INTO items VALUES (1);\n" * 1000
        test_file.write_bytes(test_content)

        compressed_path, original_size, compressed_size = compress_file(str(test_file))

        self.assertEqual(compressed_path, f"{test_file}.gz")
        self.assertFalse(test_file.exists())
        self.assertTrue(Path(compressed_path).exists())
        self.assertEqual(original_size, len(test_content))
        self.assertLess(compressed_size, original_size)
        with gzip.open(compressed_path, "rb") as f:
            self.assertEqual(f.read(), test_content)

    def test_compress_missing_file(self):
        with self.assertRaises(CompressionError):
            compress_file(str(Path(self.temp_dir) / "missing.sql"))

    def test_compress_failure_removes_partial_output(self):
        test_file = Path(self.temp_dir) / "dump.sql"
        test_file.write_bytes(b"data")

        with patch("apps.db_backup.encryption.gzip.open", side_effect=OSError("disk full")):
            with self.assertRaises(CompressionError) as context:
                compress_file(str(test_file))

        self.assertIn("disk full", str(context.exception))
        self.assertTrue(test_file.exists())
        self.assertFalse(Path(f"{test_file}.gz").exists())


class EncryptionTests(SimpleTestCase):
    """Test in-place Fernet encryption."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.key = Fernet.generate_key()

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_encrypt_file_in_place(self):
        test_file = Path(self.temp_dir) / "dump.sql.gz"
        test_content = b"Sensitive dump content"
        test_file.write_bytes(test_content)

        self.assertTrue(encrypt_file(str(test_file), self.key))

        ciphertext = test_file.read_bytes()
        self.assertNotEqual(ciphertext, test_content)
        self.assertEqual(Fernet(self.key).decrypt(ciphertext), test_content)
        self.assertEqual(list(Path(self.temp_dir).iterdir()), [test_file])

    def test_encrypt_missing_file_returns_false(self):
        self.assertFalse(encrypt_file(str(Path(self.temp_dir) / "missing.sql"), self.key))

    def test_encrypt_without_key_returns_false(self):
        test_file = Path(self.temp_dir) / "dump.sql"
        test_file.write_bytes(b"plain")

        self.assertFalse(encrypt_file(str(test_file), ""))
        self.assertEqual(test_file.read_bytes(), b"plain")

    def test_encryptor_uses_its_key(self):
        test_file = Path(self.temp_dir) / "dump.sql"
        test_file.write_bytes(b"plain")

        self.assertTrue(Encryptor(self.key.decode("utf-8"))(str(test_file)))
        self.assertEqual(Fernet(self.key).decrypt(test_file.read_bytes()), b"plain")
