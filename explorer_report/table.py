import json
import math
import re
from typing import Union

from explorer_report.models import JsonValue, QueryResult


def format_value(value: JsonValue) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return _format_float(value)
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple)):
        return ",".join("" if v is None else format_value(v) for v in value)
    if isinstance(value, dict):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    return str(value)


def _format_float(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    # 1e-07 -> 1e-7
    return re.sub(r"e([+-])0+(\d)", r"e\1\2", repr(value))


def build_separator(count: int) -> str:
    return "|".join(["---"] * count) + "\n"


def results_to_table(results: Union[QueryResult, dict]) -> str:
    """Render query results as a Markdown pipe table.

    Cell values are not escaped, so a ``|`` inside a value shifts the columns
    of that row.
    """
    if isinstance(results, dict):
        results = QueryResult.from_dict(results)

    text = " | ".join(results.columns) + "\n" + build_separator(len(results.columns))
    for row in results.rows:
        text += " | ".join(format_value(v) for v in row) + "\n"
    return text
