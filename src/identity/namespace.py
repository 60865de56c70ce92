"""
Key Namespaces

Each key belongs to the consensus subsystem it is used by. One physical key
commonly serves several roles, and is then registered once per namespace.
"""

from enum import Enum
from typing import List, Union


class KeyNamespace(Enum):
    """Consensus subsystem a key is used for."""
    AURA = "aura"
    AUTHORITY_DISCOVERY = "audi"
    BABE = "babe"
    GRANDPA = "gran"
    IM_ONLINE = "imon"

    @classmethod
    def all(cls) -> List["KeyNamespace"]:
        """Return every namespace, in declaration order."""
        return list(cls)

    @property
    def key_type_id(self) -> bytes:
        """Four-byte key type identifier used across the ecosystem."""
        return self.value.encode("ascii")

    @classmethod
    def from_key_type_id(cls, key_type_id: Union[str, bytes]) -> "KeyNamespace":
        if isinstance(key_type_id, bytes):
            key_type_id = key_type_id.decode("ascii", errors="replace")
        try:
            return cls(key_type_id)
        except ValueError:
            raise ValueError(f"Unknown key type id: {key_type_id!r}") from None
