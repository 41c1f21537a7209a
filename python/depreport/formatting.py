"""Number formatting for report cells."""

from dataclasses import dataclass
from typing import Dict, Tuple

KILOBYTE = 1024
MEGABYTE = 1024 * 1024
GIGABYTE = 1024 * 1024 * 1024

# locale -> (grouping separator, decimal separator)
LOCALE_SEPARATORS: Dict[str, Tuple[str, str]] = {
    "en": (",", "."),
    "de": (".", ","),
    "es": (".", ","),
    "it": (".", ","),
    "nl": (".", ","),
    "pt": (".", ","),
    "fr": (" ", ","),
    "ru": (" ", ","),
    "ch": ("'", "."),
}


@dataclass(frozen=True)
class FormatConfig:
    """Separators used when turning numeric values into display strings."""

    grouping_separator: str = ","
    decimal_separator: str = "."

    @classmethod
    def for_locale(cls, locale: str) -> 'FormatConfig':
        """Build a configuration from a locale tag such as 'de' or 'fr_FR'."""
        language = (locale or "en").replace("-", "_").split("_")[0].lower()
        grouping, decimal = LOCALE_SEPARATORS.get(language, LOCALE_SEPARATORS["en"])
        return cls(grouping_separator=grouping, decimal_separator=decimal)

    def _localize(self, text: str) -> str:
        # Python always formats with ',' and '.', swap in the configured separators
        return (
            text.replace(",", "\0")
            .replace(".", self.decimal_separator)
            .replace("\0", self.grouping_separator)
        )

    def format_count(self, value: int) -> str:
        """Format an integer with grouping, e.g. 12,345."""
        return self._localize(f"{value:,d}")

    def format_file_size(self, size: int) -> str:
        """
        Format a byte count with a 1024 based unit and two decimals.

        Sizes below one unit keep a leading zero, e.g. 512 bytes is 0.50 KB.
        """
        if size > GIGABYTE:
            value, unit = size / GIGABYTE, "GB"
        elif size > MEGABYTE:
            value, unit = size / MEGABYTE, "MB"
        else:
            value, unit = size / KILOBYTE, "KB"
        return f"{self._localize(f'{value:,.2f}')} {unit}"

    @staticmethod
    def format_revision(revision: float) -> str:
        """Format the highest JDK revision seen."""
        return str(float(revision))


DEFAULT_FORMAT = FormatConfig()
