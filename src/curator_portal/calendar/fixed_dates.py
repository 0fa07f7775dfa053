from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional, Sequence

import orjson

from ..domain import FixedDate

logger = logging.getLogger(__name__)

# Months are 1-12; the table is ordered by academic year, September first.
DEFAULT_FIXED_DATES: tuple[FixedDate, ...] = (
    FixedDate(9, 3, "День солидарности в борьбе с терроризмом"),
    FixedDate(11, 4, "День народного единства"),
    FixedDate(12, 1, "Всемирный день борьбы со СПИДом"),
    FixedDate(12, 3, "День Неизвестного Солдата"),
    FixedDate(12, 5, "День добровольца (волонтёра)"),
    FixedDate(12, 9, "День Героев Отечества / Междунар. день борьбы с коррупцией"),
    FixedDate(12, 12, "День Конституции РФ"),
    FixedDate(1, 25, "День российского студенчества"),
    FixedDate(1, 27, "День снятия блокады Ленинграда"),
    FixedDate(2, 8, "День российской науки"),
    FixedDate(2, 15, "День памяти воинов-интернационалистов"),
    FixedDate(2, 17, "День РСО"),
    FixedDate(2, 21, "Международный день родного языка"),
    FixedDate(2, 23, "День защитника Отечества"),
    FixedDate(3, 18, "День воссоединения Крыма с Россией"),
    FixedDate(4, 7, "Всемирный день здоровья"),
    FixedDate(4, 12, "День космонавтики"),
    FixedDate(4, 19, "День памяти о геноциде"),
    FixedDate(5, 9, "День Победы"),
    FixedDate(5, 15, "Международный день семьи"),
    FixedDate(5, 24, "День славянской письменности"),
    FixedDate(5, 31, "Всемирный день без табака"),
    FixedDate(6, 6, "День русского языка"),
    FixedDate(6, 12, "День России"),
    FixedDate(6, 22, "День памяти и скорби"),
)


def parse_fixed_dates(records: Iterable[dict]) -> tuple[FixedDate, ...]:
    table: list[FixedDate] = []
    for record in records:
        entry = FixedDate.from_record(record)
        if not 1 <= entry.month <= 12 or not 1 <= entry.day <= 31:
            raise ValueError(f"Fixed date {entry.title!r} has an impossible month/day {entry.month}/{entry.day}")
        table.append(entry)
    return tuple(table)


def load_fixed_dates(path: Optional[Path] = None) -> Sequence[FixedDate]:
    """Return the recurring date table from ``path`` or the built-in defaults."""

    if path is None:
        return DEFAULT_FIXED_DATES
    records = orjson.loads(path.read_bytes())
    if not isinstance(records, list):
        raise ValueError(f"{path} must contain a JSON array of fixed dates")
    table = parse_fixed_dates(records)
    logger.info("Loaded %d fixed dates from %s", len(table), path)
    return table
