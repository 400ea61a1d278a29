"""
Tests for bulk import of rooms and customers (CSV and Excel).
"""

import openpyxl
import pytest

from utils.errors import ValidationError


@pytest.fixture
def rooms_csv(tmp_path):
    path = tmp_path / 'rooms.csv'
    path.write_text(
        'Name,Price\n'
        '101,1500\n'
        '102,1500.50\n'
        '\n'
        '101,1800\n'
        ',900\n'
        '103,free\n',
        encoding='utf-8'
    )
    return str(path)


@pytest.fixture
def customers_xlsx(tmp_path):
    path = tmp_path / 'customers.xlsx'
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.append(['name', 'address', 'taxId'])
    ws.append(['Acme Co.', '1 Main Rd, Bangkok', '0105551234567'])
    ws.append(['Beta Ltd.', '9 River Rd, Chiang Mai', 105559876543])
    ws.append(['No Tax Id', 'Somewhere', None])
    wb.save(path)
    return str(path)


def test_import_rooms_from_csv(app, rooms_csv):
    from blueprints.admin.services import import_rooms
    from models.room import get_all_rooms

    with app.app_context():
        result = import_rooms(rooms_csv)
        rooms = {room['name']: room['price'] for room in get_all_rooms()}

    assert result['added'] == 2
    assert result['skipped'] == 3
    assert len(result['errors']) == 3
    assert str(rooms['102']) == '1500.50'
    assert '103' not in rooms


def test_import_customers_from_xlsx(app, customers_xlsx):
    from blueprints.admin.services import import_customers
    from models.customer import get_all_customers

    with app.app_context():
        result = import_customers(customers_xlsx)
        names = sorted(c['name'] for c in get_all_customers())

    assert result == {
        'added': 2,
        'skipped': 1,
        'errors': ['Row 4 (No Tax Id): missing tax_id'],
    }
    assert names == ['Acme Co.', 'Beta Ltd.']


def test_unsupported_file_type(app, tmp_path):
    from blueprints.admin.services import import_rooms

    path = tmp_path / 'rooms.txt'
    path.write_text('name,price\n101,100\n')

    with app.app_context():
        with pytest.raises(ValidationError):
            import_rooms(str(path))


def test_import_data_cli(app, rooms_csv, customers_xlsx):
    runner = app.test_cli_runner()
    result = runner.invoke(args=['import-data', '--rooms', rooms_csv, '--customers', customers_xlsx])

    assert result.exit_code == 0
    assert 'Rooms: ' in result.output
    assert 'Customers: ' in result.output

    from models.room import get_all_rooms
    with app.app_context():
        assert len(get_all_rooms()) == 2


def test_import_data_cli_requires_a_file(app):
    result = app.test_cli_runner().invoke(args=['import-data'])
    assert result.exit_code != 0
