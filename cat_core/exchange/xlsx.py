from __future__ import annotations

import io
import logging
from collections.abc import Sequence
from pathlib import Path

import pandas as pd

from cat_core.analysis.match_analysis import AnalysisData
from cat_core.segments.models import Segment

logger = logging.getLogger(__name__)

HEADER_KEYWORDS = ("content", "source", "text", "segment", "original", "원문", "소스")


def _resolve_source(*, file_bytes: bytes | None, file_path: Path | None) -> io.BytesIO | Path:
    if file_bytes is not None:
        return io.BytesIO(file_bytes)

    if file_path is None:
        raise ValueError("Either file_bytes or file_path is required")

    return Path(file_path).expanduser()


def _is_blank(value: object) -> bool:
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _cell_text(value: object) -> str | None:
    if _is_blank(value) or isinstance(value, bool):
        return None
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    return None


def _content_column(header: Sequence[object]) -> int:
    # The last matching header wins.
    index = -1
    for position, cell in enumerate(header):
        if isinstance(cell, str) and cell.strip().lower() in HEADER_KEYWORDS:
            index = position
    return index


def _texts_from_rows(rows: list[list[object]]) -> list[str]:
    if not rows:
        return []

    header = rows[0]
    column = _content_column(header)
    if column != -1:
        return [
            text
            for row in rows[1:]
            if column < len(row) and (text := _cell_text(row[column])) is not None
        ]

    if len(header) > 1:
        first = header[0]
        header_like = isinstance(first, str) and " " not in first and len(first) < 30
        start = 1 if header_like else 0
        return [
            text
            for row in rows[start:]
            if len(row) > 1 and (text := _cell_text(row[1])) is not None
        ]

    texts: list[str] = []
    for row in rows:
        for cell in row:
            if isinstance(cell, str) and cell.strip():
                texts.append(cell.strip())
    return texts


def read_source_texts(
    *,
    file_bytes: bytes | None = None,
    file_path: Path | None = None,
    sheet_name: str | int = 0,
) -> list[str]:
    """Extract translatable strings from the first sheet of a workbook.

    A header cell named like ``Source`` or ``Text`` selects its column. Without
    one, a multi-column sheet uses its second column (the first is assumed to
    be a key) and a single-column sheet yields every text cell.
    """
    source = _resolve_source(file_bytes=file_bytes, file_path=file_path)
    dataframe = pd.read_excel(
        source,
        sheet_name=sheet_name,
        header=None,
        dtype=object,
        engine="openpyxl",
    )
    rows = [
        [None if _is_blank(value) else value for value in record]
        for record in dataframe.itertuples(index=False, name=None)
    ]
    texts = _texts_from_rows(rows)
    logger.info("Read %d source strings from workbook", len(texts))
    return texts


def export_translations(segments: Sequence[Segment], output_path: Path) -> Path:
    dataframe = pd.DataFrame.from_records(
        [
            {
                "#": index,
                "Source": segment.source,
                "Target": segment.target or "",
                "Status": segment.status.value,
            }
            for index, segment in enumerate(segments, start=1)
        ],
        columns=["#", "Source", "Target", "Status"],
    )
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
        dataframe.to_excel(writer, sheet_name="Translations", index=False)
    return output_path


def export_analysis(analysis: AnalysisData, word_rate: float, output_path: Path) -> Path:
    rows: list[list[object]] = [["Match Rate", "Segments", "Words", "Rate (%)", "Cost"]]
    rows.extend(
        [result.tier.name, result.segments, result.words, result.tier.rate, round(result.cost)]
        for result in analysis.tiers
    )
    rows.extend(
        [
            ["", "", "", "", ""],
            ["Summary", "", "", "", ""],
            ["Total Segments", analysis.total_segments, "", "", ""],
            ["Total Words", analysis.total_words, "", "", ""],
            ["Word Rate", word_rate, "per word", "", ""],
            ["Full Cost (No TM)", "", "", "", analysis.full_cost],
            ["Actual Cost", "", "", "", round(analysis.total_cost)],
            ["Savings", "", "", "", round(analysis.savings)],
            ["Savings %", "", "", "", f"{analysis.savings_percent}%"],
        ]
    )

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
        pd.DataFrame(rows).to_excel(writer, sheet_name="Analysis", index=False, header=False)
    return output_path
