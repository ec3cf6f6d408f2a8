"""Named settings: the UPI address and the shared-secret gate keys."""

import logging
import secrets
from collections.abc import Sequence

from festival.domain import RecordKind, Setting
from festival.domain.errors import GateRejectedError, SettingNotFoundError
from festival.stores.interfaces import DocumentStore

logger = logging.getLogger(__name__)


class SettingService:
    """Service for reading and writing settings by name."""

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    def list_settings(self) -> list[Setting]:
        return self._store.query(RecordKind.SETTING, index="by_name")

    def get_setting(self, name: str) -> Setting | None:
        found = self._store.query(RecordKind.SETTING, index="by_name", value=name)
        return found[0] if found else None

    def setting_value(self, name: str) -> str:
        """Return a setting's value.

        Raises:
            SettingNotFoundError: If the setting was never written.
        """
        setting = self.get_setting(name)
        if setting is None:
            raise SettingNotFoundError(name)
        return setting.value

    def update_setting(self, name: str, value: str) -> Setting:
        """Patch an existing setting.

        Raises:
            SettingNotFoundError: If the setting was never written.
        """
        setting = self.get_setting(name)
        if setting is None:
            raise SettingNotFoundError(name)
        self._store.patch(setting.id, {"value": value})
        logger.info("Setting %s updated", name)
        return self._store.get(setting.id)

    def put_setting(self, name: str, value: str) -> Setting:
        """Create a setting on first write, patch it afterwards."""
        setting = self.get_setting(name)
        if setting is not None:
            return self.update_setting(name, value)
        setting_id = self._store.insert(RecordKind.SETTING, {"name": name, "value": value})
        logger.info("Setting %s created", name)
        return self._store.get(setting_id)

    def verify_gate(self, gates: Sequence[str], key: str | None) -> str:
        """Check a shared secret against the settings named after the gates.

        Returns the first gate whose key matches.

        Raises:
            GateRejectedError: If the key is missing or matches none of the gates.
        """
        if key is not None:
            for gate in gates:
                setting = self.get_setting(gate)
                if setting is not None and secrets.compare_digest(
                    setting.value.encode(), key.encode()
                ):
                    return gate
        logger.warning("Rejected key for gate(s) %s", ", ".join(gates))
        raise GateRejectedError(", ".join(gates))
