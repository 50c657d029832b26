"""
Credential resolution - blends stored values with environment fallbacks.
"""

from __future__ import annotations
import logging
import os
from typing import Callable, Mapping, Optional, Union

from .models import (
    CredentialSet,
    MaskedField,
    Service,
    ENV_VARS,
    SERVICE_FIELDS,
    PLAIN_FIELDS,
    MASK_THRESHOLD,
    VISIBLE_PREFIX_LENGTH,
    VISIBLE_SUFFIX_LENGTH,
    MASK_REPLACEMENT,
    FULL_MASK,
)
from .store import CredentialStore

logger = logging.getLogger(__name__)

CredentialListener = Callable[[CredentialSet], None]


def mask_value(value: Optional[str]) -> MaskedField:
    """
    Mask a secret for display.

    Long values keep 4 characters at each end. Short values collapse to a
    fixed-width mask so their real length is not shown.
    """
    if not value:
        return MaskedField(value="", masked="", exists=False)
    if len(value) > MASK_THRESHOLD:
        masked = value[:VISIBLE_PREFIX_LENGTH] + MASK_REPLACEMENT + value[-VISIBLE_SUFFIX_LENGTH:]
    else:
        masked = FULL_MASK
    return MaskedField(value=value, masked=masked, exists=True)


def _plain_value(value: Optional[str]) -> MaskedField:
    value = value or ""
    return MaskedField(value=value, masked=value, exists=bool(value))


class CredentialResolver:
    """
    Public credential API used by the settings UI and service clients.

    Stored values win over environment variables, so a value saved in the
    UI overrides a developer's AXIS_* default.
    """

    def __init__(
        self,
        store: CredentialStore = None,
        environ: Mapping[str, str] = None,
    ):
        """
        Initialize resolver.

        Args:
            store: Credential store instance
            environ: Environment mapping (defaults to os.environ)
        """
        self.store = store or CredentialStore()
        self._environ = environ if environ is not None else os.environ
        self._listeners: list[CredentialListener] = []

    @property
    def db_path(self):
        return self.store.db_path

    # ── Reads ────────────────────────────────────────────────────────

    def get(self) -> CredentialSet:
        """Stored values only; unset fields are None."""
        return CredentialSet(**self.store.get_all())

    def get_with_fallback(self) -> CredentialSet:
        """
        Resolve every field: stored value, else environment, else "".
        """
        stored = self.store.get_all()
        resolved = {}
        for name in CredentialSet.field_names():
            value = stored.get(name)
            if value and value.strip():
                resolved[name] = value
                continue
            env_value = (self._environ.get(ENV_VARS[name]) or "").strip()
            resolved[name] = env_value
        return CredentialSet(**resolved)

    def has_credentials(self, service: Union[Service, str]) -> bool:
        """True if every field the service needs resolves to a non-empty value."""
        try:
            service = Service(service)
        except ValueError:
            logger.debug(f"Unknown service: {service!r}")
            return False

        creds = self.get_with_fallback()
        return all(getattr(creds, name) for name in SERVICE_FIELDS[service])

    def get_masked(self) -> dict[str, MaskedField]:
        """Resolved credentials in display-safe form, keyed by field name."""
        creds = self.get_with_fallback()
        masked = {}
        for name, value in creds.to_dict().items():
            if name in PLAIN_FIELDS:
                masked[name] = _plain_value(value)
            else:
                masked[name] = mask_value(value)
        return masked

    # ── Writes ───────────────────────────────────────────────────────

    def save(self, credentials: Union[CredentialSet, Mapping[str, Optional[str]]]) -> bool:
        """
        Partial update.

        Only fields with a non-None value are written. An empty string is
        written as-is, distinct from leaving the field untouched.

        Returns:
            True if the store accepted the write
        """
        if not isinstance(credentials, CredentialSet):
            credentials = CredentialSet.from_dict(dict(credentials))

        updates = {
            name: value
            for name, value in credentials.to_dict().items()
            if value is not None
        }
        if not updates:
            return True

        ok = self.store.set_many(updates)
        if ok:
            logger.info(f"Saved credential fields: {', '.join(sorted(updates))}")
            self._notify()
        return ok

    def clear(self) -> bool:
        """Remove every stored credential. Environment fallbacks still apply."""
        ok = self.store.clear()
        if ok:
            self._notify()
        return ok

    # ── Change listeners ─────────────────────────────────────────────

    def add_listener(self, callback: CredentialListener) -> None:
        """Call ``callback`` with freshly resolved credentials after save/clear."""
        if callback not in self._listeners:
            self._listeners.append(callback)

    def remove_listener(self, callback: CredentialListener) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _notify(self) -> None:
        if not self._listeners:
            return
        creds = self.get_with_fallback()
        for callback in list(self._listeners):
            try:
                callback(creds)
            except Exception:
                logger.exception(f"Credential listener {callback!r} failed")
