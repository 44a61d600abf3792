from typing import List, Dict, Any, Optional
from pydantic import ValidationError
from models.recipient_entry import (
    RecipientEntry,
    TopLevelEntry,
    SEP_NORMAL,
    SEP_WITHIN_GROUP,
)
import os
import logging

logger = logging.getLogger("recipient_chips")


# Marks "read the cap from the environment"; an explicit None means unlimited.
_FROM_ENV = object()


def _default_max_second_level() -> Optional[int]:
    raw = os.getenv("CHIPS_MAX_SECOND_LEVEL")
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid CHIPS_MAX_SECOND_LEVEL={raw!r}, no cap applied")
        return None


class EntryListBuilder:
    """
    Turns contact rows that a contacts provider already resolved into the
    ordered list of entries a chip widget renders.

    For every contact (grouped by contact id, first-seen order):
      - the first destination becomes a top-level entry carrying the photo URI
      - further destinations become second-level entries
      - SEP_WITHIN_GROUP sits between destinations of the same contact
      - SEP_NORMAL sits between contacts

    Rows without a contact id (-1) are unresolved and always stand alone.
    Rows are plain dicts; common alternative keys (id, name, email, phone,
    photo_uri) are accepted so a provider can hand over its raw result set.
    """

    def __init__(self, max_second_level: Any = _FROM_ENV):
        if max_second_level is _FROM_ENV:
            max_second_level = _default_max_second_level()
        if max_second_level is not None and max_second_level < 0:
            raise ValueError("max_second_level must be >= 0")
        self.max_second_level = max_second_level

    @staticmethod
    def _row_fields(data: Dict[str, Any]) -> Dict[str, Any]:
        contact_id = data.get("contact_id", data.get("id"))
        destination = data.get("destination") or data.get("email") or data.get("phone")
        name = data.get("display_name") or data.get("name") or data.get("contact_name")
        photo_uri = data.get("photo_thumbnail_uri") or data.get("photo_uri")

        return {
            "contact_id": -1 if contact_id is None else int(contact_id),
            "destination": str(destination).strip() if destination else None,
            "display_name": name,
            "photo_thumbnail_uri": photo_uri or None,
        }

    def _group(self, rows: List[Dict[str, Any]]) -> List[List[Dict[str, Any]]]:
        groups: Dict[Any, List[Dict[str, Any]]] = {}
        seen: Dict[Any, set] = {}
        skipped = 0

        for data in rows:
            try:
                fields = self._row_fields(data)
            except (TypeError, ValueError) as e:
                logger.warning(f"Skipping contact row with bad contact id {data!r}: {e}")
                skipped += 1
                continue

            if not fields["destination"]:
                logger.warning(f"Skipping contact row without destination: {data!r}")
                skipped += 1
                continue

            contact_id = fields["contact_id"]
            # Unresolved rows never share a group.
            group_key = contact_id if contact_id != -1 else ("unresolved", len(groups))
            key = fields["destination"].lower()
            if key in seen.setdefault(group_key, set()):
                logger.debug(f"Dropping duplicate destination {fields['destination']} for contact {contact_id}")
                continue
            seen[group_key].add(key)
            groups.setdefault(group_key, []).append(fields)

        if skipped:
            logger.info(f"Skipped {skipped} contact row(s) that could not become entries")
        return list(groups.values())

    def _top_level(self, destinations: List[Dict[str, Any]]) -> TopLevelEntry:
        first = destinations[0]
        photo_uri = next(
            (d["photo_thumbnail_uri"] for d in destinations if d["photo_thumbnail_uri"]), None
        )
        try:
            return RecipientEntry.construct_top_level_entry(
                first["display_name"],
                first["destination"],
                first["contact_id"],
                photo_uri,
            )
        except ValidationError as e:
            logger.warning(
                f"Bad photo URI {photo_uri!r} for {first['destination']}, "
                f"building entry without photo: {e.error_count()} error(s)"
            )
            return RecipientEntry.construct_top_level_entry(
                first["display_name"],
                first["destination"],
                first["contact_id"],
                None,
            )

    def build(self, rows: List[Dict[str, Any]]) -> List[RecipientEntry]:
        entries: List[RecipientEntry] = []

        for destinations in self._group(rows):
            if entries:
                entries.append(SEP_NORMAL)

            first, rest = destinations[0], destinations[1:]
            contact_id = first["contact_id"]
            if self.max_second_level is not None and len(rest) > self.max_second_level:
                logger.info(
                    f"Contact {contact_id}: showing {self.max_second_level} of "
                    f"{len(rest)} additional destination(s)"
                )
                rest = rest[: self.max_second_level]

            entries.append(self._top_level(destinations))
            for fields in rest:
                entries.append(SEP_WITHIN_GROUP)
                entries.append(RecipientEntry.construct_second_level_entry(
                    fields["display_name"] or first["display_name"],
                    fields["destination"],
                    contact_id,
                ))

        logger.info(f"Built {len(entries)} entries from {len(rows)} contact row(s)")
        return entries

    def build_unresolved(self, address: str) -> TopLevelEntry:
        """Entry for user-typed text no contact directory knows about."""
        if address is None or not address.strip():
            raise ValueError("Cannot build an entry from a blank address")
        return RecipientEntry.construct_fake_entry(address.strip())
