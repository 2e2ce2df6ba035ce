"""Unit tests: import parsers (CSV, JSON, format detection)."""
import pytest

from utils.import_parsers import parse_csv, parse_json, parse_upload

pytestmark = pytest.mark.unit


def test_parse_csv_header_and_rows():
    """CSV with header: one dict per row, values stripped."""
    content = b"name,lng,lat\n Plaza Mayor ,-3.7074,40.4155\nRetiro,-3.6823,40.4153\n"
    rows = parse_csv(content)
    assert rows == [
        {"name": "Plaza Mayor", "lng": "-3.7074", "lat": "40.4155"},
        {"name": "Retiro", "lng": "-3.6823", "lat": "40.4153"},
    ]


def test_parse_csv_drops_empty_values_and_blank_rows():
    """Empty cells are omitted; fully blank rows are skipped."""
    content = b"name,address,lng,lat\nRetiro,,-3.6823,40.4153\n,,,\n"
    assert parse_csv(content) == [{"name": "Retiro", "lng": "-3.6823", "lat": "40.4153"}]


def test_parse_csv_handles_bom_and_quoted_commas():
    """A UTF-8 BOM is ignored; quoted cells may contain commas."""
    content = '\ufeffname,tags\nMuseo,"art,museum"\n'.encode("utf-8")
    assert parse_csv(content) == [{"name": "Museo", "tags": "art,museum"}]


def test_parse_json_array():
    """JSON array of objects; lists are kept as-is."""
    content = b'[{"name": "Retiro", "coordinates": [-3.6823, 40.4153], "address": ""}]'
    assert parse_json(content) == [{"name": "Retiro", "coordinates": [-3.6823, 40.4153]}]


def test_parse_json_rejects_non_array():
    """A JSON object instead of an array is rejected."""
    with pytest.raises(ValueError, match="array"):
        parse_json(b'{"name": "Retiro"}')


def test_parse_json_rejects_non_object_rows():
    """Every array element must be an object."""
    with pytest.raises(ValueError, match="Row 2"):
        parse_json(b'[{"name": "a"}, 3]')


def test_parse_json_invalid_syntax():
    """Broken JSON raises ValueError."""
    with pytest.raises(ValueError, match="Invalid JSON"):
        parse_json(b"[{")


def test_parse_upload_detects_format():
    """Extension wins; without one, a leading '[' means JSON."""
    assert parse_upload(b'[{"name": "a"}]', "data.JSON") == [{"name": "a"}]
    assert parse_upload(b"name\na\n", "data.csv") == [{"name": "a"}]
    assert parse_upload(b'  [{"name": "b"}]', None) == [{"name": "b"}]
    assert parse_upload(b"name\nc\n", "upload") == [{"name": "c"}]
