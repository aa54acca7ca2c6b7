"""Text-location package: glyph geometry + rules → redaction plan."""
from core.locator.locator import TextLocator, locate_in_pages, process_page  # noqa: F401
