"""
Import utilities for trip CSV uploads.

Provides functions for:
- Human-readable suggestions for import failure reasons
- Formatting a one-line import summary for logs and bug reports
"""


def format_reportable(
    filename: str | None,
    status: str,
    failure_reason: str | None = None,
    imported: int = 0,
    total_rows: int = 0,
    dialect: str | None = None,
) -> str:
    """
    Format a copy-pasteable string describing an import.

    Example output:
        trips.csv | SUCCESS | imperial | 42/43 rows
        export.csv | FAILED | missing_distance_column | 0/0 rows
    """
    parts = [filename or "<upload>", status.upper()]

    if failure_reason:
        parts.append(failure_reason)
    if dialect:
        parts.append(dialect)

    parts.append(f"{imported}/{total_rows} rows")
    return " | ".join(parts)


def get_failure_suggestion(failure_reason: str, columns_detected: list | None = None) -> str:
    """
    Generate actionable suggestion text for a failure reason.

    Args:
        failure_reason: The error code/reason
        columns_detected: List of columns found in the CSV

    Returns:
        str: Human-readable suggestion
    """
    suggestions = {
        "missing_distance_column": (
            "CSV is missing a distance column. "
            "Expected 'Distance in Mile' or 'Distance in KM'. "
            f"Found: {', '.join(columns_detected[:5]) if columns_detected else 'none'}"
        ),
        "empty_file": "The uploaded file is empty. Please select a valid CSV file.",
        "invalid_csv": "The file could not be parsed as CSV. Ensure it's a trip export with a header row.",
        "encoding_error": (
            "The file contains invalid characters. "
            "Try saving the file as UTF-8 in your spreadsheet application."
        ),
    }

    return suggestions.get(
        failure_reason, f"Import failed with error: {failure_reason}. Please check the file format."
    )
