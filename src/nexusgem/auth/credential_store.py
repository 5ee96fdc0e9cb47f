"""Persistent, per-scope configuration and credential store.

A config file is a single JSON object. With a scope key (``--repo``) the
active record is the nested object under that key; without one it is the
top-level object itself::

    {
      "url": "https://nexus.example.com/repository/gems",
      "authorization": "Basic YWxpY2U6czNjcmV0",
      "internal": {
        "url": "https://nexus.internal/repository/gems",
        "authorization": "gAAAAABl...",
        "salt": "k1q2n0...=="
      }
    }

Sibling scopes are never touched by writes to another scope. The file is
loaded once when a store is opened, and every mutation writes the whole
mapping back immediately (atomic replace, ``0o600``). There is no batching
and no explicit close.

Two implementations share one interface and are selected at open time by
:func:`open_store`:

* :class:`ConfigStore` -- plain values. An encrypted ``authorization`` is
  reported as present by :meth:`~ConfigStore.has` but never returned.
* :class:`EncryptedConfigStore` -- ``authorization`` tokens are encrypted
  with a passphrase-derived key (see :mod:`nexusgem.auth.cipher`). The
  ``salt`` field marks a record as encrypted, so
  :meth:`~ConfigStore.is_encrypted` works without the passphrase.

Secret fields (``authorization`` and the ``salt`` marker) can live in a
separate secrets file. Its location is remembered in the main record's
``secrets`` field, so later invocations find it without the flag. Secret
fields still in the main file are moved on the first write; opening a
store never writes.

See Also:
    :class:`~nexusgem.auth.manager.CredentialManager` -- drives the setup flow
    on top of these stores.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

from nexusgem.auth.cipher import PassphraseCipher
from nexusgem.config import load_mapping, save_mapping

AUTHORIZATION = "authorization"
ENCRYPTION_MARKER = "salt"
SECRETS_LOCATION = "secrets"
SECRET_FIELDS = frozenset({AUTHORIZATION, ENCRYPTION_MARKER})


class _ScopedFile:
    """A JSON mapping file held in memory, and the record a scope key selects in it."""

    def __init__(self, path: Path, scope: Optional[str]) -> None:
        self.path = path
        self.scope = scope
        self._data = load_mapping(path)

    def record(self, create: bool = False) -> dict[str, Any]:
        if self.scope is None:
            return self._data
        record = self._data.get(self.scope)
        if isinstance(record, dict):
            return record
        if not create:
            return {}
        record = {}
        self._data[self.scope] = record
        return record

    def save(self) -> None:
        save_mapping(self.path, self._data)


class ConfigStore:
    """Read/write one scope's record of a config file.

    Args:
        path: The config file. A missing file reads as empty.
        scope: Scope key selecting the record, or ``None`` for the
            top-level record.
        secrets_path: Separate file for the secret fields. When omitted, a
            location remembered in the record is used, if any.

    Example::

        store = ConfigStore(Path("~/.config/nexusgem/nexus.json"), scope="internal")
        store.set("url", "https://nexus.internal/repository/gems")
        assert store.has("url")
    """

    def __init__(
        self,
        path: Path,
        scope: Optional[str] = None,
        secrets_path: Optional[Path] = None,
    ) -> None:
        self._config = _ScopedFile(Path(path), scope)
        self._secrets: Optional[_ScopedFile] = None
        self._adopted = True

        if secrets_path is None:
            remembered = self._config.record().get(SECRETS_LOCATION)
            if remembered:
                secrets_path = Path(remembered)
        if secrets_path is not None and Path(secrets_path) != Path(path):
            self._secrets = _ScopedFile(Path(secrets_path), scope)
            # secret fields move over on the first write, never on open
            self._adopted = False

    @property
    def path(self) -> Path:
        """The main config file."""
        return self._config.path

    @property
    def secrets_path(self) -> Optional[Path]:
        """The secrets file, when secret fields are kept apart."""
        return self._secrets.path if self._secrets else None

    @property
    def scope(self) -> Optional[str]:
        return self._config.scope

    # ------------------------------------------------------------------ #
    # Public interface
    # ------------------------------------------------------------------ #

    def get(self, field: str) -> Any:
        """Return the value of *field*, or ``None`` when absent.

        ``authorization`` is returned decoded: plain stores return ``None``
        for an encrypted value, encrypted stores decrypt it.
        """
        if field == AUTHORIZATION:
            return self._read_authorization()
        return self._raw_get(field)

    def set(self, field: str, value: Any) -> None:
        """Store *value* under *field* and write the file. ``None`` deletes the field."""
        if value is None:
            self.delete(field)
        elif field == AUTHORIZATION:
            self._write_authorization(value)
        else:
            self._update({field: value})

    def delete(self, field: str) -> None:
        """Remove *field* from the record and write the file."""
        self._update({field: None})

    def get_raw(self, field: str) -> Any:
        """Return *field* exactly as stored, without decrypting it."""
        return self._raw_get(field)

    def has(self, field: str) -> bool:
        """Whether *field* is stored, regardless of whether it can be decoded."""
        return self._raw_get(field) is not None

    def is_encrypted(self) -> bool:
        """Whether the record's authorization is (to be) stored encrypted."""
        return self.has(ENCRYPTION_MARKER)

    def as_dict(self) -> dict[str, Any]:
        """Return a copy of the record with secret fields merged in, as stored."""
        data = dict(self._config.record())
        if self._secrets is not None:
            data.update(
                (k, v) for k, v in self._secrets.record().items() if k in SECRET_FIELDS
            )
        return data

    # ------------------------------------------------------------------ #
    # Authorization encoding
    # ------------------------------------------------------------------ #

    def _read_authorization(self) -> Any:
        raw = self._raw_get(AUTHORIZATION)
        if isinstance(raw, str) and self.is_encrypted():
            return None
        return raw

    def _write_authorization(self, value: Any) -> None:
        changes: dict[str, Any] = {AUTHORIZATION: value}
        if isinstance(value, str):
            # a plaintext token replaces the encrypted one
            changes[ENCRYPTION_MARKER] = None
        self._update(changes)

    # ------------------------------------------------------------------ #
    # Raw record access
    # ------------------------------------------------------------------ #

    def _file_for(self, field: str) -> _ScopedFile:
        if self._secrets is not None and field in SECRET_FIELDS:
            return self._secrets
        return self._config

    def _raw_get(self, field: str) -> Any:
        value = self._file_for(field).record().get(field)
        if value is None and not self._adopted and field in SECRET_FIELDS:
            value = self._config.record().get(field)
        return value

    def _update(self, changes: dict[str, Any]) -> None:
        """Apply *changes* (``None`` removes a field) and save every touched file."""
        if not self._adopted:
            self._adopt_secrets_file()
        touched: list[_ScopedFile] = []
        for field, value in changes.items():
            target = self._file_for(field)
            if value is None:
                target.record().pop(field, None)
            else:
                target.record(create=True)[field] = value
            if target not in touched:
                touched.append(target)
        for target in touched:
            target.save()

    def _adopt_secrets_file(self) -> None:
        """Remember the secrets location and move secret fields out of the main file."""
        assert self._secrets is not None
        self._adopted = True
        record = self._config.record()
        location = str(self._secrets.path)
        moved = {k: record[k] for k in SECRET_FIELDS if k in record}
        if record.get(SECRETS_LOCATION) == location and not moved:
            return

        config_record = self._config.record(create=True)
        config_record[SECRETS_LOCATION] = location
        for field in moved:
            config_record.pop(field, None)
        if moved:
            self._secrets.record(create=True).update(moved)
            self._secrets.save()
        self._config.save()


class EncryptedConfigStore(ConfigStore):
    """A :class:`ConfigStore` whose authorization token is encrypted with a passphrase.

    Opening a record that is not yet encrypted marks it as encrypted and
    re-encrypts an existing plaintext token in place.

    Args:
        path: The config file.
        passphrase: The encryption passphrase. Held only in memory, as the
            derived key.
        scope: Scope key selecting the record.
        secrets_path: Separate file for the secret fields.

    Raises:
        DecryptionError: From :meth:`get` when the passphrase does not match
            the stored ciphertext.
    """

    def __init__(
        self,
        path: Path,
        passphrase: str,
        scope: Optional[str] = None,
        secrets_path: Optional[Path] = None,
    ) -> None:
        super().__init__(path, scope=scope, secrets_path=secrets_path)
        salt = self._raw_get(ENCRYPTION_MARKER)
        self._cipher = PassphraseCipher(passphrase, salt)
        if salt is None:
            changes: dict[str, Any] = {ENCRYPTION_MARKER: self._cipher.salt}
            plaintext = self._raw_get(AUTHORIZATION)
            if isinstance(plaintext, str):
                changes[AUTHORIZATION] = self._cipher.encrypt(plaintext)
            self._update(changes)

    def _read_authorization(self) -> Any:
        raw = self._raw_get(AUTHORIZATION)
        if isinstance(raw, str):
            return self._cipher.decrypt(raw)
        return raw

    def _write_authorization(self, value: Any) -> None:
        if isinstance(value, str):
            value = self._cipher.encrypt(value)
        self._update({AUTHORIZATION: value, ENCRYPTION_MARKER: self._cipher.salt})


def open_store(
    path: Path,
    scope: Optional[str] = None,
    passphrase: Optional[str] = None,
    secrets_path: Optional[Path] = None,
) -> ConfigStore:
    """Open the record for *scope* in *path*, encrypted when a passphrase is given."""
    if passphrase is None:
        return ConfigStore(path, scope=scope, secrets_path=secrets_path)
    return EncryptedConfigStore(
        path, passphrase, scope=scope, secrets_path=secrets_path
    )
