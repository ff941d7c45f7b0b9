"""Application layer - Declaration-time metadata storage."""

import inspect
import logging
import weakref
from enum import Enum
from typing import Any, Dict, Hashable, Optional, Tuple, get_type_hints

from strata_di.domain import IMetadataStore, MetadataError, MetadataKey

logger = logging.getLogger(__name__)

_Slot = Tuple[Hashable, Optional[str]]


def _normalize(metadata_key: Any) -> Hashable:
    # str-based enums hash by name, so store them by value
    return metadata_key.value if isinstance(metadata_key, Enum) else metadata_key


def _slot(metadata_key: Any, property_key: Optional[str]) -> _Slot:
    return (_normalize(metadata_key), property_key)


def _supports_weakref(target: Any) -> bool:
    try:
        weakref.ref(target)
    except TypeError:
        return False
    return True


class MetadataStore(IMetadataStore):
    """Side table associating declaration-time facts with targets.

    Entries are keyed by metadata key, target identity and an optional
    member name. Classes inherit the metadata defined on their bases.
    Targets are held weakly, so decorating a class or function does not keep
    it alive. Targets without weak reference support are held strongly.

    Attributes:
        _entries: Mapping of (metadata key, member name) to a weak table of target to value.
        _strong_entries: Mapping of ((metadata key, member name), target) to value.

    Example:
        >>> store = MetadataStore()
        >>> store.define(MetadataKey.REGISTRATION, TransientRegistration(), UserService)
        >>> store.get(MetadataKey.REGISTRATION, UserService)
        TransientRegistration(factory_fn=None, key=None)
    """

    def __init__(self) -> None:
        """Initialize an empty metadata store."""
        self._entries: Dict[_Slot, "weakref.WeakKeyDictionary[Any, Any]"] = {}
        self._strong_entries: Dict[Tuple[_Slot, Any], Any] = {}

    def define(self, metadata_key: Any, value: Any, target: Any, property_key: Optional[str] = None) -> None:
        """Attach a metadata value, replacing any value already in that slot.

        Args:
            metadata_key: The metadata slot name.
            value: The value to store.
            target: The class, function or object to attach the value to.
            property_key: Optional member name on the target.

        Raises:
            MetadataError: If the target is None.
        """
        if target is None:
            raise MetadataError(f"Cannot define '{_normalize(metadata_key)}' metadata on an undefined target")

        slot = _slot(metadata_key, property_key)
        if _supports_weakref(target):
            self._entries.setdefault(slot, weakref.WeakKeyDictionary())[target] = value
        else:
            self._strong_entries[(slot, target)] = value
        logger.debug("Defined '%s' metadata on %r", _normalize(metadata_key), target)

    def get_own(self, metadata_key: Any, target: Any, property_key: Optional[str] = None) -> Any:
        """Look up a value defined directly on the target.

        Returns:
            The stored value, or None if the slot is empty.
        """
        if target is None:
            return None

        slot = _slot(metadata_key, property_key)
        if not _supports_weakref(target):
            return self._strong_entries.get((slot, target))
        table = self._entries.get(slot)
        return table.get(target) if table is not None else None

    def get(self, metadata_key: Any, target: Any, property_key: Optional[str] = None) -> Any:
        """Look up a value on the target or, for classes, on its bases.

        The declared return type of a member is read from its annotations
        when no value was defined explicitly.

        Args:
            metadata_key: The metadata slot name.
            target: The class, function or object to inspect.
            property_key: Optional member name on the target.

        Returns:
            The stored value, or None if no value is found.
        """
        if target is None:
            return None

        candidates = inspect.getmro(target) if inspect.isclass(target) else (target,)
        for candidate in candidates:
            value = self.get_own(metadata_key, candidate, property_key)
            if value is not None:
                return value

        if property_key and _normalize(metadata_key) == MetadataKey.RETURN_TYPE.value:
            return self._declared_return_type(target, property_key)
        return None

    def has(self, metadata_key: Any, target: Any, property_key: Optional[str] = None) -> bool:
        """Check whether a value is available through get()."""
        return self.get(metadata_key, target, property_key) is not None

    def delete(self, metadata_key: Any, target: Any, property_key: Optional[str] = None) -> None:
        """Remove a value defined directly on the target, if any."""
        if target is None:
            return
        slot = _slot(metadata_key, property_key)
        if not _supports_weakref(target):
            self._strong_entries.pop((slot, target), None)
        elif slot in self._entries:
            self._entries[slot].pop(target, None)

    def clear(self) -> None:
        """Remove every stored value."""
        self._entries.clear()
        self._strong_entries.clear()

    def _declared_return_type(self, target: Any, property_key: str) -> Any:
        member = getattr(target, property_key, None)
        if member is None:
            return None
        member = getattr(member, "__func__", member)
        try:
            hints = get_type_hints(member)
        except (NameError, TypeError) as e:
            logger.warning("Could not read type hints of %r.%s: %s", target, property_key, e)
            return None
        return hints.get("return")


metadata = MetadataStore()
"""Default store used by the registration decorators and containers."""
