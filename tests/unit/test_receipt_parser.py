"""Unit tests for receipt normalization."""

import pytest
from datetime import datetime, timedelta
import sys
import os

# Add src directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', 'src'))

from receipt_processor.models import ExtractedReceipt
from receipt_processor.parser import ReceiptParser


class TestReceiptParser:
    """Test cases for ReceiptParser."""

    @pytest.fixture
    def ziraat_output(self):
        """Model output for an outgoing FAST transfer."""
        return {
            'transactionDirection': 'expense',
            'amount': 1500,
            'currency': 'TRY',
            'recipient': 'Ali Usta',
            'recipientIban': 'TR12 0001 0000 0000 0000 0000 01',
            'bank': 'Ziraat Bankası',
            'branchCode': '1234',
            'transactionType': 'FAST',
            'transactionId': 'ABC123',
            'commission': 5.0,
            'tax': 0.25,
            'date': '2024-01-15',
            'time': '14:30:00',
            'suggestedCategory': 'İşçi'
        }

    def test_normalize_complete_data(self, ziraat_output):
        """Test normalization of a complete extraction."""
        extracted = ExtractedReceipt.from_model_output(ziraat_output)

        record = ReceiptParser.normalize(extracted)

        assert record.direction == 'expense'
        assert record.amount == 1500.0
        assert record.currency == 'TRY'
        assert record.recipient == 'Ali Usta'
        assert record.recipient_iban == 'TR120001000000000000000001'
        assert record.bank == 'Ziraat Bankası'
        assert record.branch_code == '1234'
        assert record.transaction_type == 'FAST'
        assert record.date == '2024-01-15'
        assert record.time == '14:30:00'
        assert record.category == 'İşçi'

    def test_normalize_keeps_raw_response(self, ziraat_output):
        """Test that the untouched model output travels with the record."""
        extracted = ExtractedReceipt.from_model_output(ziraat_output)

        record = ReceiptParser.normalize(extracted)

        assert record.raw_response == ziraat_output

    def test_normalize_calculates_total_fee(self, ziraat_output):
        """Test total fee is computed when missing but commission and tax are present."""
        record = ReceiptParser.normalize(ExtractedReceipt.from_model_output(ziraat_output))

        assert record.commission == 5.0
        assert record.tax == 0.25
        assert record.total_fee == 5.25

    def test_normalize_keeps_given_total_fee(self, ziraat_output):
        """Test an explicit total fee is not recomputed."""
        ziraat_output['totalFee'] = 6.0

        record = ReceiptParser.normalize(ExtractedReceipt.from_model_output(ziraat_output))

        assert record.total_fee == 6.0

    def test_normalize_missing_direction_defaults_to_expense(self, ziraat_output):
        """Test that a missing direction is treated as an expense."""
        del ziraat_output['transactionDirection']

        record = ReceiptParser.normalize(ExtractedReceipt.from_model_output(ziraat_output))

        assert record.direction == 'expense'

    @pytest.mark.parametrize('direction', ['transfer', '', 42, None])
    def test_normalize_invalid_direction_defaults_to_expense(self, ziraat_output, direction):
        """Test that an unrecognised direction is treated as an expense."""
        ziraat_output['transactionDirection'] = direction

        record = ReceiptParser.normalize(ExtractedReceipt.from_model_output(ziraat_output))

        assert record.direction == 'expense'

    def test_normalize_direction_is_case_insensitive(self, ziraat_output):
        """Test that direction matching ignores case and whitespace."""
        ziraat_output['transactionDirection'] = ' INCOME '
        ziraat_output['suggestedCategory'] = 'Satış Geliri'

        record = ReceiptParser.normalize(ExtractedReceipt.from_model_output(ziraat_output))

        assert record.direction == 'income'
        assert record.category == 'Satış Geliri'

    def test_normalize_unknown_expense_category(self, ziraat_output):
        """Test that a category outside the expense taxonomy falls back to Diğer."""
        ziraat_output['suggestedCategory'] = 'Yatırım'

        record = ReceiptParser.normalize(ExtractedReceipt.from_model_output(ziraat_output))

        assert record.category == 'Diğer'

    def test_normalize_expense_category_on_income(self, ziraat_output):
        """Test that an expense category on an income falls back to Diğer Gelir."""
        ziraat_output['transactionDirection'] = 'income'
        ziraat_output['suggestedCategory'] = 'Kasap'

        record = ReceiptParser.normalize(ExtractedReceipt.from_model_output(ziraat_output))

        assert record.category == 'Diğer Gelir'

    def test_normalize_missing_category(self, ziraat_output):
        """Test that a missing category uses the catch-all."""
        del ziraat_output['suggestedCategory']

        record = ReceiptParser.normalize(ExtractedReceipt.from_model_output(ziraat_output))

        assert record.category == 'Diğer'

    def test_normalize_null_fields(self):
        """Test that null or placeholder text fields become None."""
        extracted = ExtractedReceipt.from_model_output({
            'amount': None,
            'recipient': 'null',
            'sender': '   ',
            'bank': None,
            'description': ['not', 'text']
        })

        record = ReceiptParser.normalize(extracted)

        assert record.amount is None
        assert record.recipient is None
        assert record.sender is None
        assert record.bank is None
        assert record.description is None

    def test_normalize_string_amount(self, ziraat_output):
        """Test that Turkish formatted amounts are parsed."""
        ziraat_output['amount'] = '1.234,56'

        record = ReceiptParser.normalize(ExtractedReceipt.from_model_output(ziraat_output))

        assert record.amount == 1234.56

    def test_normalize_numeric_text_fields(self, ziraat_output):
        """Test that numeric reference values are kept as text."""
        ziraat_output['transactionId'] = 987654
        ziraat_output['branchCode'] = 42

        record = ReceiptParser.normalize(ExtractedReceipt.from_model_output(ziraat_output))

        assert record.transaction_id == '987654'
        assert record.branch_code == '42'

    @pytest.mark.parametrize('value,expected', [
        ('TRY', 'TRY'),
        ('try', 'TRY'),
        ('TL', 'TRY'),
        ('₺', 'TRY'),
        ('usd', 'USD'),
        ('Lira', 'TRY'),
        (None, 'TRY')
    ])
    def test_clean_currency(self, value, expected):
        """Test currency code cleaning."""
        assert ReceiptParser._clean_currency(value) == expected

    def test_clean_iban(self):
        """Test that IBANs lose whitespace and are upper-cased."""
        assert ReceiptParser._clean_iban('tr33 0006 1005 1978 6457 8413 26') == 'TR330006100519786457841326'
        assert ReceiptParser._clean_iban(None) is None
        assert ReceiptParser._clean_iban('') is None


class TestParseAmount:
    """Test cases for amount parsing."""

    @pytest.mark.parametrize('value,expected', [
        (1500, 1500.0),
        (45.678, 45.68),
        ('1.234,56', 1234.56),
        ('1,234.56', 1234.56),
        ('12,50', 12.5),
        ('12.50', 12.5),
        ('1.500', 1500.0),
        ('1,500', 1500.0),
        ('0,500', 0.5),
        ('1.000.000', 1000000.0),
        ('1.000.000,75', 1000000.75),
        ('₺1.500,00', 1500.0),
        ('1.500,00 TL', 1500.0),
        ('250', 250.0)
    ])
    def test_parse_amount(self, value, expected):
        """Test amount parsing for numbers and locale-formatted text."""
        assert ReceiptParser.parse_amount(value) == expected

    def test_parse_amount_negative(self):
        """Test that negative amounts are made positive."""
        assert ReceiptParser.parse_amount(-50.0) == 50.0
        assert ReceiptParser.parse_amount('-1.250,00') == 1250.0

    @pytest.mark.parametrize('value', [None, True, 'abc', '', {'amount': 5}, float('nan')])
    def test_parse_amount_invalid(self, value):
        """Test that unparseable amounts become None."""
        assert ReceiptParser.parse_amount(value) is None


class TestParseDate:
    """Test cases for date parsing."""

    @pytest.mark.parametrize('value,expected', [
        ('2024-01-15', '2024-01-15'),
        ('2024-01-05', '2024-01-05'),
        ('2024-01-05T10:30:00', '2024-01-05'),
        ('15.01.2024', '2024-01-15'),
        ('05.01.2024', '2024-01-05'),
        ('05/01/2024', '2024-01-05'),
        ('15 Jan 2024', '2024-01-15')
    ])
    def test_parse_date(self, value, expected):
        """Test parsing of ISO and day-first dates."""
        assert ReceiptParser.parse_date(value) == expected

    @pytest.mark.parametrize('value', [None, '', 'bilinmiyor'])
    def test_parse_date_invalid(self, value):
        """Test that unparseable dates become None."""
        assert ReceiptParser.parse_date(value) is None

    def test_parse_date_future_is_kept(self):
        """Test that future dates are kept as read."""
        future = (datetime.utcnow() + timedelta(days=30)).strftime('%Y-%m-%d')

        assert ReceiptParser.parse_date(future) == future


class TestHasUsableContent:
    """Test cases for the usable-content check."""

    def test_amount_only(self):
        """Test that a non-zero amount alone is usable."""
        assert ReceiptParser.has_usable_content(ExtractedReceipt(amount=10))

    def test_counterparty_only(self):
        """Test that a recipient or sender alone is usable."""
        assert ReceiptParser.has_usable_content(ExtractedReceipt(recipient='Ali Usta'))
        assert ReceiptParser.has_usable_content(ExtractedReceipt(sender='Mehmet Yılmaz'))

    def test_nothing_usable(self):
        """Test that zero amount and no counterparty is not usable."""
        assert not ReceiptParser.has_usable_content(ExtractedReceipt())
        assert not ReceiptParser.has_usable_content(ExtractedReceipt(amount=0, recipient='null'))
        assert not ReceiptParser.has_usable_content(ExtractedReceipt(amount='0,00', bank='Akbank'))
