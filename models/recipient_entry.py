from pydantic import AnyUrl, BaseModel, ConfigDict, PrivateAttr, field_validator
from typing import Any, Optional, Union
from enum import Enum
import threading
import logging

logger = logging.getLogger("recipient_chips")


class EntryType(str, Enum):
    PERSON = "person"
    SEPARATOR_NORMAL = "separator_normal"
    SEPARATOR_WITHIN_GROUP = "separator_within_group"


class RecipientEntry(BaseModel):
    """
    One row inside a recipient auto-complete list.

    Rows come in three shapes:
      SeparatorEntry    – a visual divider (normal or within a group)
      TopLevelEntry     – first row for a contact, carries the photo URI
      SecondLevelEntry  – further destinations of an already shown contact

    The accessors live on this base class so a renderer can read any row
    without checking its shape first. Fields a shape does not carry read as
    None / -1 / False.
    """

    model_config = ConfigDict(frozen=True)

    entry_type: EntryType

    # ── Factories ─────────────────────────────────────────────────────────────

    @staticmethod
    def construct_fake_entry(address: str) -> "TopLevelEntry":
        """
        Builds an entry from an address the user typed that could not be
        resolved to a contact, so it has no contact id or photo.
        """
        return TopLevelEntry(display_name=address, destination=address, contact_id=-1)

    @staticmethod
    def construct_top_level_entry(
        display_name: Optional[str],
        destination: str,
        contact_id: int,
        photo_thumbnail_uri: Union[AnyUrl, str, None] = None,
    ) -> "TopLevelEntry":
        # Text URIs are parsed by the field; malformed text raises ValidationError.
        if photo_thumbnail_uri == "":
            photo_thumbnail_uri = None
        return TopLevelEntry(
            display_name=display_name,
            destination=destination,
            contact_id=contact_id,
            photo_thumbnail_uri=photo_thumbnail_uri,
        )

    @staticmethod
    def construct_second_level_entry(
        display_name: Optional[str],
        destination: str,
        contact_id: int,
    ) -> "SecondLevelEntry":
        return SecondLevelEntry(
            display_name=display_name,
            destination=destination,
            contact_id=contact_id,
        )

    # ── Accessors ─────────────────────────────────────────────────────────────

    def get_entry_type(self) -> EntryType:
        return self.entry_type

    def get_display_name(self) -> Optional[str]:
        return None

    def get_destination(self) -> Optional[str]:
        return None

    def get_contact_id(self) -> int:
        return -1

    def is_first_level(self) -> bool:
        return False

    def get_photo_thumbnail_uri(self) -> Optional[AnyUrl]:
        return None

    def get_photo_bytes(self) -> Optional[bytes]:
        return None

    def set_photo_bytes(self, photo_bytes: Optional[bytes]) -> None:
        raise TypeError(f"{self.entry_type.value} entries have no photo slot")

    def is_separator(self) -> bool:
        return self.entry_type != EntryType.PERSON

    @property
    def is_divider(self) -> bool:
        return self.is_separator()

    # The photo slot is not part of an entry's identity.
    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, RecipientEntry):
            return NotImplemented
        return type(self) is type(other) and self.__dict__ == other.__dict__

    def __hash__(self) -> int:
        return hash((type(self), tuple(self.__dict__.values())))


class SeparatorEntry(RecipientEntry):
    """Divider row. Only the two module-level instances below are ever used."""

    @field_validator("entry_type")
    @classmethod
    def check_not_person(cls, v: EntryType) -> EntryType:
        if v == EntryType.PERSON:
            raise ValueError("separator entries cannot have entry_type 'person'")
        return v

    def __str__(self) -> str:
        return "---"


class PersonEntry(RecipientEntry):
    entry_type: EntryType = EntryType.PERSON
    display_name: Optional[str] = None
    # Email address or phone number.
    destination: str
    contact_id: int = -1

    # Filled in after construction, once the photo is fetched.
    _photo_lock: Any = PrivateAttr(default_factory=threading.Lock)
    _photo_bytes: Optional[bytes] = PrivateAttr(default=None)

    @field_validator("entry_type")
    @classmethod
    def check_person_only(cls, v: EntryType) -> EntryType:
        if v != EntryType.PERSON:
            raise ValueError(f"person entries cannot have entry_type '{v.value}'")
        return v

    def get_display_name(self) -> Optional[str]:
        return self.display_name

    def get_destination(self) -> Optional[str]:
        return self.destination

    def get_contact_id(self) -> int:
        return self.contact_id

    def set_photo_bytes(self, photo_bytes: Optional[bytes]) -> None:
        """This can be called outside the rendering thread. None clears the slot."""
        if photo_bytes is not None:
            if not isinstance(photo_bytes, (bytes, bytearray, memoryview)):
                raise TypeError(
                    f"photo_bytes must be bytes-like, got {type(photo_bytes).__name__}"
                )
            # Snapshot mutable buffers so later writes by the caller cannot tear it.
            photo_bytes = bytes(photo_bytes)

        with self._photo_lock:
            self._photo_bytes = photo_bytes

        logger.debug(
            f"Photo slot updated for {self.destination} "
            f"({len(photo_bytes) if photo_bytes is not None else 0} bytes)"
        )

    def get_photo_bytes(self) -> Optional[bytes]:
        """This can be called outside the rendering thread."""
        with self._photo_lock:
            return self._photo_bytes

    # Copies get their own lock; fields and the stored bytes are immutable.
    def __copy__(self) -> "PersonEntry":
        clone = super().__copy__()
        clone._photo_lock = threading.Lock()
        clone._photo_bytes = self.get_photo_bytes()
        return clone

    def __deepcopy__(self, memo: Optional[dict] = None) -> "PersonEntry":
        return self.__copy__()

    def __str__(self) -> str:
        if self.display_name and self.display_name != self.destination:
            return f"{self.display_name} <{self.destination}>"
        return self.destination


class TopLevelEntry(PersonEntry):
    photo_thumbnail_uri: Optional[AnyUrl] = None

    def is_first_level(self) -> bool:
        return True

    def get_photo_thumbnail_uri(self) -> Optional[AnyUrl]:
        return self.photo_thumbnail_uri


class SecondLevelEntry(PersonEntry):
    pass


# Separator dividing two persons or groups.
SEP_NORMAL = SeparatorEntry(entry_type=EntryType.SEPARATOR_NORMAL)
# Separator dividing two entries inside a person or a group.
SEP_WITHIN_GROUP = SeparatorEntry(entry_type=EntryType.SEPARATOR_WITHIN_GROUP)
