"""
Encrypted credential storage using SQLite + Fernet.

SECURITY NOTE: every installation encrypts with the same fixed key
(``CredentialStore.ENCRYPTION_PASSPHRASE``). The file can be copied
between machines and user accounts and still open, but the key gives no
per-user secrecy. Treat the encryption as obfuscation at rest; anyone
with read access to the file and this source can decrypt it. Protection
comes from the per-user data directory, not from the key.
"""

from __future__ import annotations
import base64
import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from .models import CredentialSet

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = Path.home() / ".axis" / "credentials.db"


class VaultCorruptError(Exception):
    """Stored credential data could not be read back."""
    pass


def _is_structural(error: sqlite3.DatabaseError) -> bool:
    """
    True when the file itself is broken, not just busy.

    OperationalError covers locked, read-only and full databases; those
    are transient and must never trigger a reset. A missing table means
    the schema is gone.
    """
    if isinstance(error, sqlite3.OperationalError):
        return "no such table" in str(error)
    return True


class CredentialStore:
    """
    Encrypted key/value storage for the CredentialSet fields.

    One row per field, value encrypted with Fernet. A structurally broken
    file resets the store to empty; a busy or read-only one is left alone
    and the operation reports failure.
    """

    SCHEMA_VERSION = 1

    # Fixed across installs so credential files stay portable. See module docstring.
    ENCRYPTION_PASSPHRASE = "axis-secure-credentials-key-v1"
    KEY_SALT = b"axis-credentials-salt-v1"
    KEY_ITERATIONS = 100_000

    # Seconds to wait on a lock held by another connection
    busy_timeout = 5.0

    def __init__(self, db_path: Path = None, passphrase: str = None):
        """
        Initialize credential store.

        Args:
            db_path: Path to SQLite database file
            passphrase: Override the fixed passphrase (tests only)
        """
        self.db_path = Path(db_path) if db_path else DEFAULT_DB_PATH
        self._fernet = Fernet(self._derive_key(passphrase or self.ENCRYPTION_PASSPHRASE))
        self._fields = frozenset(CredentialSet.field_names())
        self._ensure_db()

    def _derive_key(self, passphrase: str) -> bytes:
        """Derive a Fernet key from the passphrase."""
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=32,
            salt=self.KEY_SALT,
            iterations=self.KEY_ITERATIONS,
        )
        return base64.urlsafe_b64encode(kdf.derive(passphrase.encode()))

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(str(self.db_path), timeout=self.busy_timeout)

    def _ensure_db(self) -> None:
        """Create database and tables if needed, resetting on corruption."""
        try:
            self._create_schema()
        except sqlite3.DatabaseError as e:
            if not _is_structural(e):
                logger.exception(f"Credential store {self.db_path} not available")
                return
            logger.warning(f"Credential store unreadable ({e}), resetting {self.db_path}")
            self.reset()
        except OSError as e:
            logger.error(f"Cannot create credential store at {self.db_path}: {e}")

    def _create_schema(self) -> None:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        conn = self._connect()
        try:
            conn.executescript('''
                CREATE TABLE IF NOT EXISTS vault_meta (
                    key TEXT PRIMARY KEY,
                    value TEXT
                );

                CREATE TABLE IF NOT EXISTS credentials (
                    field TEXT PRIMARY KEY,
                    value_enc BLOB NOT NULL,
                    updated_at TEXT
                );
            ''')
            conn.execute(
                "INSERT OR IGNORE INTO vault_meta (key, value) VALUES (?, ?)",
                ('version', str(self.SCHEMA_VERSION))
            )
            conn.commit()
        finally:
            conn.close()

    def reset(self) -> bool:
        """
        Discard the backing file and start over with an empty store.

        Returns:
            True if an empty store is in place
        """
        try:
            self.db_path.unlink(missing_ok=True)
        except OSError as e:
            logger.error(f"Failed to remove credential store {self.db_path}: {e}")
            return False
        try:
            self._create_schema()
        except (OSError, sqlite3.Error) as e:
            logger.error(f"Failed to recreate credential store {self.db_path}: {e}")
            return False
        logger.info(f"Credential store reset at {self.db_path}")
        return True

    def _encrypt(self, data: str) -> bytes:
        return self._fernet.encrypt(data.encode())

    def _decrypt(self, data: bytes) -> str:
        return self._fernet.decrypt(data).decode()

    def _read_rows(self) -> dict[str, str]:
        """
        Read and decrypt every stored field.

        Raises:
            VaultCorruptError: file or any value is unreadable
            sqlite3.OperationalError: database busy or unavailable
        """
        try:
            conn = self._connect()
            try:
                cursor = conn.execute("SELECT field, value_enc FROM credentials")
                rows = cursor.fetchall()
            finally:
                conn.close()
        except sqlite3.DatabaseError as e:
            if not _is_structural(e):
                raise
            raise VaultCorruptError(f"database unreadable: {e}") from e

        values = {}
        for name, value_enc in rows:
            if name not in self._fields:
                logger.debug(f"Skipping unknown stored field: {name}")
                continue
            try:
                values[name] = self._decrypt(value_enc)
            except (InvalidToken, TypeError, UnicodeDecodeError) as e:
                raise VaultCorruptError(f"field '{name}' failed to decrypt") from e
        return values

    def get_all(self) -> dict[str, str]:
        """
        All stored fields, decrypted.

        Returns:
            Mapping of field name to value; unset fields are absent.
            Empty when the store is corrupt (and reset) or unavailable.
        """
        try:
            return self._read_rows()
        except VaultCorruptError as e:
            logger.warning(f"Credential store corrupt ({e}), resetting to empty")
            self.reset()
            return {}
        except sqlite3.Error:
            logger.exception(f"Failed to read credentials from {self.db_path}")
            return {}

    def get(self, name: str) -> Optional[str]:
        """Get one stored field."""
        return self.get_all().get(name)

    def set_many(self, values: dict[str, str]) -> bool:
        """
        Write fields, overwriting prior values.

        Args:
            values: Field name -> value. Unknown fields are skipped.

        Returns:
            True if the write succeeded
        """
        rows = []
        now = datetime.now().isoformat()
        for name, value in values.items():
            if name not in self._fields:
                logger.warning(f"Refusing to store unknown credential field: {name}")
                continue
            rows.append((name, self._encrypt(value), now))

        if not rows:
            return True

        try:
            self._write_rows(rows)
        except sqlite3.DatabaseError as e:
            if not _is_structural(e):
                logger.exception(f"Failed to write credentials to {self.db_path}")
                return False
            # Broken file: nothing in it is recoverable, start over
            logger.warning(f"Credential store unreadable on write ({e}), resetting")
            if not self.reset():
                return False
            try:
                self._write_rows(rows)
            except sqlite3.Error:
                logger.exception(f"Failed to write credentials to {self.db_path}")
                return False

        logger.debug(f"Stored {len(rows)} credential field(s)")
        return True

    def _write_rows(self, rows: list[tuple]) -> None:
        conn = self._connect()
        try:
            conn.executemany(
                "INSERT OR REPLACE INTO credentials (field, value_enc, updated_at) "
                "VALUES (?, ?, ?)",
                rows
            )
            conn.commit()
        finally:
            conn.close()

    def clear(self) -> bool:
        """Remove every stored field."""
        try:
            conn = self._connect()
            try:
                conn.execute("DELETE FROM credentials")
                conn.commit()
            finally:
                conn.close()
        except sqlite3.DatabaseError as e:
            if not _is_structural(e):
                logger.exception(f"Failed to clear credentials in {self.db_path}")
                return False
            logger.warning(f"Credential store unreadable on clear ({e}), resetting")
            return self.reset()
        logger.info("Credentials cleared")
        return True
