"""CSV rendering for the admin export.

The file targets spreadsheet users in locales where the comma is the
decimal separator, hence the semicolon delimiter and a leading UTF-8 BOM
so Excel picks the right encoding.
"""

import csv
import io
from datetime import datetime
from typing import Any, Iterable, Mapping, Sequence

UTF8_BOM: str = "\ufeff"
DELIMITER: str = ";"

EXPORT_COLUMNS: tuple[str, ...] = (
    "id",
    "created_at",
    "lead_name",
    "lead_email",
    "lead_company",
    "lead_role",
    "score_strategy",
    "score_process",
    "score_data",
    "score_tech",
    "score_people",
    "score_journey",
    "score_overall",
    "maturity_level",
)


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def render_csv(rows: Iterable[Mapping[str, Any]], columns: Sequence[str]) -> str:
    """Render rows as semicolon-delimited CSV with a BOM and header line.

    Fields containing the delimiter, a double quote or a line break are
    wrapped in double quotes with inner quotes doubled; missing values
    become empty fields.

    Args:
        rows: Row mappings keyed by column name.
        columns: Column order, also written as the header.

    Returns:
        The CSV document as a string, starting with the UTF-8 BOM.
    """
    buffer = io.StringIO()
    writer = csv.writer(
        buffer,
        delimiter=DELIMITER,
        quotechar='"',
        quoting=csv.QUOTE_MINIMAL,
        lineterminator="\n",
    )
    writer.writerow(columns)
    for row in rows:
        writer.writerow([_cell(row.get(column)) for column in columns])
    return UTF8_BOM + buffer.getvalue()
