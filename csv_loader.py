import csv
import os
import logging
from typing import Any, Dict, List

logger = logging.getLogger(__name__)

class ContactsCSVLoader:
    def __init__(self, base_path: str = "."):
        self.base_path = base_path

    def load_rows(self, filename: str) -> List[Dict[str, Any]]:
        """
        Returns one dict per CSV row with lower-cased keys and stripped values.
        Expected columns: contact_id, display_name, destination,
        photo_thumbnail_uri (the builder also accepts name/email/photo_uri).
        """
        filepath = os.path.join(self.base_path, filename)
        rows: List[Dict[str, Any]] = []
        bad_ids = 0

        if not os.path.exists(filepath):
            logger.warning(f"CSV file not found: {filepath}")
            return rows

        try:
            with open(filepath, mode='r', encoding='utf-8-sig', newline='') as f:
                reader = csv.DictReader(f)
                for row in reader:
                    clean: Dict[str, Any] = {}
                    for key, val in row.items():
                        if key is None:
                            continue
                        clean[key.strip().lower()] = val.strip() if isinstance(val, str) else val

                    raw_id = clean.get("contact_id")
                    if raw_id in (None, ""):
                        clean["contact_id"] = -1
                    else:
                        try:
                            clean["contact_id"] = int(raw_id)
                        except ValueError:
                            bad_ids += 1
                            logger.warning(f"Non-numeric contact_id {raw_id!r} in {filename}, treating as unresolved")
                            clean["contact_id"] = -1

                    rows.append(clean)

            if bad_ids > 0:
                logger.info(f"{bad_ids} row(s) in {filename} had an unusable contact_id")

        except Exception as e:
            logger.error(f"Error reading CSV {filepath}: {e}")

        return rows
