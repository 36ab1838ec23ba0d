"""
File-format rules for the prompt CSV.

This file exists to keep the wire format in one place.
"""

TARGET_ENCODING = "utf-8-sig"  # UTF-8 with BOM
BOM = "\ufeff"
DELIMITER = ","
QUOTE = '"'
LINE_SEPARATOR = "\n"

MIME_TYPE = "text/csv;charset=utf-8"
FILE_EXTENSION = ".csv"
EXPORT_FILENAME = "prompts_promptpad.csv"

# Positional column order; header text is never matched on decode.
COLUMNS = ("title", "content", "notes", "author", "link", "category", "date")
HEADER_LABELS = ("Title", "Content", "Notes", "Author", "Link", "Category", "Date")

DEFAULT_AUTHOR = "Anonymous"
DEFAULT_CATEGORY = "General"
INITIAL_CATEGORIES = ("General", "Creative", "Code")
