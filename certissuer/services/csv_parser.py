"""
CSV Parser Service
Parsing of student lists uploaded for bulk certificate generation
"""

import csv
import io
from typing import List, Dict, Union

from certissuer.errors import EmptyBatchError, InvalidCSVError
from certissuer.schemas.certificate import StudentRow


class CSVParser:
    """Utility for parsing bulk student CSV files"""

    # Ordered: when several columns match one key, the first listed alias wins
    HEADER_ALIASES = {
        "student_name": ("name", "student_name", "full name", "student name"),
        "course_name": ("course", "course_name", "course name"),
        "completion_date": ("completion date", "completion_date", "date"),
        "email": ("email", "email address"),
    }

    @staticmethod
    def _normalize_header(header: str) -> str:
        if not header:
            return ""
        return header.strip().lstrip("\ufeff").lower()

    @classmethod
    def _map_headers(cls, headers: List[str]) -> Dict[str, List[str]]:
        """Columns matching each key, in alias priority order"""
        normalized = [(cls._normalize_header(h), h) for h in headers]
        mapped = {}
        for key, aliases in cls.HEADER_ALIASES.items():
            columns = [h for alias in aliases for norm, h in normalized if norm == alias]
            if columns:
                mapped[key] = columns
        return mapped

    @staticmethod
    def _decode(file_content: Union[bytes, str]) -> str:
        if isinstance(file_content, str):
            return file_content
        try:
            return file_content.decode("utf-8-sig")
        except UnicodeDecodeError:
            return file_content.decode("latin-1")

    @classmethod
    def parse_student_csv(cls, file_content: Union[bytes, str]) -> List[StudentRow]:
        """Parse every row up front; no rows at all raises EmptyBatchError"""
        csv_text = cls._decode(file_content)

        try:
            reader = csv.DictReader(io.StringIO(csv_text))
            fieldnames = reader.fieldnames
        except csv.Error as e:
            raise InvalidCSVError(f"CSV parsing error: {e}") from e
        if not fieldnames:
            raise EmptyBatchError("CSV file is empty or has invalid format.")

        header_map = cls._map_headers(fieldnames)

        def value(row: dict, key: str) -> str:
            # first non-blank matching column wins, per row
            for column in header_map.get(key, ()):
                cell = (row.get(column) or "").strip()
                if cell:
                    return cell
            return ""

        rows = []
        try:
            for row_num, row in enumerate(reader, start=2):
                if not row:
                    continue
                student = StudentRow(
                    row=row_num,
                    student_name=value(row, "student_name"),
                    course_name=value(row, "course_name"),
                    completion_date=value(row, "completion_date"),
                    email=value(row, "email") or None,
                )
                if not (student.student_name or student.course_name or student.completion_date):
                    continue
                rows.append(student)
        except csv.Error as e:
            raise InvalidCSVError(f"CSV parsing error: {e}") from e

        if not rows:
            raise EmptyBatchError("CSV file is empty or has invalid format.")

        return rows
