"""
Spill Virtual Printer

The fixed attribute set advertised to anyone who calls back. Built once at
startup and only ever read afterwards.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

from spill.constants import PRINTER_NAME, PRINTER_PATH, PRINTER_STATE_IDLE


@dataclass(frozen=True)
class PrinterAttributes:
    """
    Ordered, immutable name/value pairs describing one idle printer.

    Iteration order is the construction order.
    """
    items: Tuple[Tuple[str, str], ...]

    def __iter__(self) -> Iterator[Tuple[str, str]]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        for key, value in self.items:
            if key == name:
                return value
        return default

    def names(self) -> Tuple[str, ...]:
        return tuple(name for name, _ in self.items)

    @classmethod
    def from_pairs(cls, pairs) -> "PrinterAttributes":
        return cls(items=tuple((str(name), str(value)) for name, value in pairs))

    @classmethod
    def default(cls) -> "PrinterAttributes":
        return cls.from_pairs([
            ("printer-uri", f"http://localhost:999{PRINTER_PATH}"),
            ("printer-name", PRINTER_NAME),
            ("printer-info", "This is a test printer."),
            ("printer-state", str(PRINTER_STATE_IDLE)),
        ])


DEFAULT_PRINTER = PrinterAttributes.default()
