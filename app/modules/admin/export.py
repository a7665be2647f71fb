import csv
import io
from typing import Any, List

from app.modules.admin.schemas import UserView

EXPORT_COLUMNS = ("id", "full_name", "email", "role_id", "plan", "created_at", "updated_at")

# Leading characters a spreadsheet reads as the start of a formula
FORMULA_PREFIXES = ("=", "+", "-", "@", "\t", "\r")


def safe_cell(value: Any) -> Any:
    """Neutralise values a spreadsheet would evaluate by prefixing a single quote"""
    if value is None:
        return ""
    if isinstance(value, str) and value.startswith(FORMULA_PREFIXES):
        return f"'{value}"
    return value


def users_to_csv(users: List[UserView]) -> str:
    """Render merged users as CSV with a header row; fields with commas or quotes are quoted"""
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=EXPORT_COLUMNS, lineterminator="\n")
    writer.writeheader()
    for user in users:
        row = user.model_dump(include=set(EXPORT_COLUMNS))
        writer.writerow({key: safe_cell(value) for key, value in row.items()})
    return buffer.getvalue()
