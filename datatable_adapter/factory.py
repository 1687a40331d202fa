from typing import Any, Mapping, Optional

from .exceptions import ConfigurationError


class DataTableFactory:
    """Metadata a page needs to draw an empty table the widget then fills over AJAX."""

    def __init__(self, title: str = ""):
        self.title = ""
        self.html_id: Optional[str] = None
        self.table_header: Any = None
        self.table_rows: Any = None
        self.table_row_columns: Any = None
        self.ajax_url: Optional[str] = None
        self.set_title(title)

    def set_title(self, title: str):
        self.title = title

    def set_table_header(self, header):
        """
        Args:
            header: Header labels, as a list/tuple or a mapping of key -> label.

        Raises:
            ConfigurationError: ``header`` is neither a sequence nor a mapping.
        """
        if not isinstance(header, (list, tuple, Mapping)):
            raise ConfigurationError(
                f"Table header must be a list or a mapping, got {type(header).__name__}"
            )
        self.table_header = header

    def set_table_rows(self, rows):
        self.table_rows = rows

    def set_row_columns(self, columns):
        self.table_row_columns = columns

    def set_html_id(self, html_id: str):
        self.html_id = html_id

    def set_ajax_url(self, url: str):
        self.ajax_url = url

    # -- getters --

    def get_headers(self):
        return self.table_header

    def get_header(self, key):
        """Returns the header stored under ``key``, or an empty list when there is none."""
        header = self.table_header
        if isinstance(header, Mapping):
            return header.get(key, [])
        if isinstance(header, (list, tuple)) and isinstance(key, int) and -len(header) <= key < len(header):
            return header[key]
        return []

    def get_row_columns(self):
        return self.table_row_columns

    def get_table_rows(self):
        return self.table_rows

    def get_title(self) -> str:
        return self.title

    def get_html_id(self) -> Optional[str]:
        return self.html_id

    def get_ajax_url(self) -> Optional[str]:
        return self.ajax_url
