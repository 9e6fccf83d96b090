"""SheetsClientのテスト"""
from unittest.mock import Mock, patch

import pytest
from googleapiclient.errors import HttpError

from invoicecraft.domain.exceptions import ExternalServiceError
from invoicecraft.infrastructure.google_sheets.sheets_client import SheetsClient, column_letter


def _http_error(status: int, reason: str) -> HttpError:
    return HttpError(resp=Mock(status=status, reason=reason), content=b"error")


@pytest.fixture
def client():
    with patch.object(SheetsClient, '_authenticate'):
        sheets_client = SheetsClient("spreadsheet_id_123")
    sheets_client.service = Mock()
    return sheets_client


def test_column_letter():
    assert column_letter(1) == "A"
    assert column_letter(15) == "O"
    assert column_letter(26) == "Z"
    assert column_letter(27) == "AA"
    with pytest.raises(ValueError):
        column_letter(0)


@patch("time.sleep")
def test_call_retries_rate_limit(mock_sleep, client):
    """429はリトライして成功する"""
    request = Mock()
    request.execute.side_effect = [_http_error(429, "Too Many Requests"), {"values": []}]

    result = client._call("テスト", request)

    assert result == {"values": []}
    assert request.execute.call_count == 2


@patch("time.sleep")
def test_call_gives_up_after_three_attempts(mock_sleep, client):
    request = Mock()
    request.execute.side_effect = _http_error(503, "Service Unavailable")

    with pytest.raises(ExternalServiceError):
        client._call("テスト", request)

    assert request.execute.call_count == 3


@patch("time.sleep")
def test_call_does_not_retry_client_errors(mock_sleep, client):
    request = Mock()
    request.execute.side_effect = _http_error(404, "Not Found")

    with pytest.raises(ExternalServiceError):
        client._call("テスト", request)

    assert request.execute.call_count == 1


def test_get_values_creates_missing_sheet(client):
    spreadsheets = client.service.spreadsheets.return_value
    spreadsheets.get.return_value.execute.return_value = {"sheets": []}
    spreadsheets.batchUpdate.return_value.execute.return_value = {
        "replies": [{"addSheet": {"properties": {"sheetId": 42}}}]
    }
    spreadsheets.values.return_value.get.return_value.execute.return_value = {"values": [["id", "name"]]}

    values = client.get_values("Customers", ("id", "name"))

    assert values == [["id", "name"]]
    body = spreadsheets.batchUpdate.call_args.kwargs["body"]
    assert body == {"requests": [{"addSheet": {"properties": {"title": "Customers"}}}]}
    header_update = spreadsheets.values.return_value.update.call_args.kwargs
    assert header_update["range"] == "Customers!A1:B1"
    assert header_update["body"] == {"values": [["id", "name"]]}


def test_get_values_writes_header_to_empty_sheet(client):
    spreadsheets = client.service.spreadsheets.return_value
    spreadsheets.get.return_value.execute.return_value = {
        "sheets": [{"properties": {"title": "Products", "sheetId": 1}}]
    }
    spreadsheets.values.return_value.get.return_value.execute.return_value = {}

    values = client.get_values("Products", ("id", "name", "unit", "unitPrice"))

    assert values == [["id", "name", "unit", "unitPrice"]]
    spreadsheets.batchUpdate.assert_not_called()
    assert spreadsheets.values.return_value.update.call_args.kwargs["range"] == "Products!A1:D1"


def test_delete_rows_from_bottom(client):
    spreadsheets = client.service.spreadsheets.return_value
    spreadsheets.get.return_value.execute.return_value = {
        "sheets": [{"properties": {"title": "InvoiceItems", "sheetId": 7}}]
    }

    client.delete_rows("InvoiceItems", ("id",), [3, 5, 3])

    requests = spreadsheets.batchUpdate.call_args.kwargs["body"]["requests"]
    assert [r["deleteDimension"]["range"]["startIndex"] for r in requests] == [4, 2]
    assert all(r["deleteDimension"]["range"]["sheetId"] == 7 for r in requests)


def test_update_row_rejects_header(client):
    with pytest.raises(ValueError):
        client.update_row("Customers", 1, ["id"])


def test_append_rows(client):
    spreadsheets = client.service.spreadsheets.return_value
    spreadsheets.get.return_value.execute.return_value = {
        "sheets": [{"properties": {"title": "Customers", "sheetId": 0}}]
    }

    client.append_rows("Customers", ("id", "name"), [["cus-1", "PT Maju Jaya"]])

    kwargs = spreadsheets.values.return_value.append.call_args.kwargs
    assert kwargs["range"] == "Customers!A1"
    assert kwargs["valueInputOption"] == "RAW"
    assert kwargs["body"] == {"values": [["cus-1", "PT Maju Jaya"]]}
