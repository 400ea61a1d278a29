"""
Bulk import of rooms and customers from CSV or Excel files.

Each row goes through the same model create functions the API uses, so the
usual validation and uniqueness rules apply. Rows that fail are skipped and
reported, the rest of the file is still imported.
"""

import csv
from typing import Any, Dict, Iterator, List

import openpyxl
from flask import current_app

from models.customer import create_customer
from models.room import create_room
from utils.errors import HotelError, ValidationError
from utils.helpers import allowed_file, get_file_extension
from utils.validators import parse_decimal, sanitize_input

# Header -> field name (headers are matched case-insensitively)
COLUMN_MAPPINGS = {
    'name': 'name',
    'room': 'name',
    'price': 'price',
    'rate': 'price',
    'address': 'address',
    'taxid': 'tax_id',
    'tax_id': 'tax_id',
    'tax id': 'tax_id',
}


def _normalize_header(value) -> str:
    normalized = str(value or '').strip().lower()
    return COLUMN_MAPPINGS.get(normalized, normalized)


def read_rows(file_path: str) -> Iterator[Dict[str, Any]]:
    """
    Yield data rows of a .csv or .xlsx file as dicts keyed by field name.

    The first row is the header. Empty rows are skipped.

    Args:
        file_path: Path to the file

    Raises:
        ValidationError: If the file extension is not supported
    """
    extension = get_file_extension(file_path)
    allowed = current_app.config.get('ALLOWED_IMPORT_EXTENSIONS', {'csv', 'xlsx'})
    if not allowed_file(file_path, allowed):
        raise ValidationError(f'Unsupported import file type: .{extension}')

    if extension == 'csv':
        with open(file_path, newline='', encoding='utf-8-sig') as handle:
            reader = csv.reader(handle)
            header = None
            for values in reader:
                if not any(v.strip() for v in values):
                    continue
                if header is None:
                    header = [_normalize_header(v) for v in values]
                    continue
                yield dict(zip(header, values))
        return

    wb = openpyxl.load_workbook(file_path, read_only=True, data_only=True)
    try:
        sheet = wb.active
        header = None
        for values in sheet.iter_rows(values_only=True):
            if not any(v not in (None, '') for v in values):
                continue
            if header is None:
                header = [_normalize_header(v) for v in values]
                continue
            yield dict(zip(header, values))
    finally:
        wb.close()


def _new_result() -> Dict[str, Any]:
    return {'added': 0, 'skipped': 0, 'errors': []}


def import_rooms(file_path: str) -> Dict[str, Any]:
    """
    Import rooms (name, price).

    Args:
        file_path: Path to a .csv or .xlsx file

    Returns:
        Dict with 'added', 'skipped' counts and 'errors' messages
    """
    result = _new_result()

    for row_num, row in enumerate(read_rows(file_path), start=2):
        name = sanitize_input(row.get('name'), max_length=100)
        try:
            if not name:
                raise ValidationError('name is required')
            price = parse_decimal(row.get('price'), 'price', minimum=0)
            create_room(name, price)
            result['added'] += 1
        except HotelError as e:
            result['skipped'] += 1
            result['errors'].append(f'Row {row_num} ({name or "?"}): {e.message}')
            current_app.logger.warning(f'[Import] Skipped room row {row_num}: {e.message}')

    current_app.logger.info(f"[Import] Rooms: {result['added']} added, {result['skipped']} skipped")
    return result


def import_customers(file_path: str) -> Dict[str, Any]:
    """
    Import customers (name, address, taxId).

    Args:
        file_path: Path to a .csv or .xlsx file

    Returns:
        Dict with 'added', 'skipped' counts and 'errors' messages
    """
    result = _new_result()

    for row_num, row in enumerate(read_rows(file_path), start=2):
        name = sanitize_input(row.get('name'), max_length=200)
        address = sanitize_input(row.get('address'), max_length=500)
        tax_id = sanitize_input(row.get('tax_id'), max_length=50)
        try:
            missing: List[str] = [
                field for field, value in
                (('name', name), ('address', address), ('tax_id', tax_id))
                if not value
            ]
            if missing:
                raise ValidationError(f"missing {', '.join(missing)}")
            create_customer(name, address, tax_id)
            result['added'] += 1
        except HotelError as e:
            result['skipped'] += 1
            result['errors'].append(f'Row {row_num} ({name or "?"}): {e.message}')
            current_app.logger.warning(f'[Import] Skipped customer row {row_num}: {e.message}')

    current_app.logger.info(f"[Import] Customers: {result['added']} added, {result['skipped']} skipped")
    return result
