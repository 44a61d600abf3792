import sys, os
import logging
import pathlib

# Make sibling packages importable regardless of how this is called
SCRIPT_DIR = str(pathlib.Path(__file__).parent.absolute())
sys.path.insert(0, SCRIPT_DIR)

from dotenv import load_dotenv

from csv_loader import ContactsCSVLoader
from executor.entry_list_builder import EntryListBuilder

logger = logging.getLogger("recipient_chips")


def setup_logging():
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s',
        handlers=[
            logging.FileHandler(os.getenv("CHIPS_LOG_FILE", "chips.log")),
            logging.StreamHandler()
        ]
    )


def main(argv=None) -> int:
    """
    Builds the auto-complete entry list for a contacts CSV export and logs
    every row. Extra arguments are treated as typed, unresolved addresses.
    """
    load_dotenv()
    setup_logging()

    args = sys.argv[1:] if argv is None else argv
    csv_file = os.getenv("CHIPS_CONTACTS_CSV", "contacts.csv")

    loader = ContactsCSVLoader(SCRIPT_DIR)
    rows = loader.load_rows(csv_file)
    logger.info(f"Loaded {len(rows)} contact row(s) from {csv_file}")

    builder = EntryListBuilder()
    entries = builder.build(rows)
    for address in args:
        try:
            entries.append(builder.build_unresolved(address))
        except ValueError as e:
            logger.warning(f"Ignoring typed address {address!r}: {e}")

    logger.info("=" * 60)
    for entry in entries:
        level = "" if entry.is_separator() or entry.is_first_level() else "    "
        logger.info(f"{level}{entry}")
    logger.info("=" * 60)
    return len(entries)


if __name__ == "__main__":
    main()
