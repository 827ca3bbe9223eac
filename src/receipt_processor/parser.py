"""Normalization of vision model output into validated transactions."""

import logging
import math
import re
from typing import Any, Optional
from datetime import datetime

from dateutil import parser as date_parser

from shared.validators import (
    EXPENSE,
    sanitize_string,
    validate_category,
    validate_direction
)
from receipt_processor.models import ExtractedReceipt, NormalizedTransaction

logger = logging.getLogger(__name__)

DEFAULT_CURRENCY = 'TRY'

_NON_NUMERIC = re.compile(r'[^\d,.\-]')
_CURRENCY_CODE = re.compile(r'^[A-Z]{3}$')

TEXT_FIELDS = [
    'recipient',
    'recipient_bank',
    'sender',
    'sender_bank',
    'bank',
    'branch_code',
    'branch_name',
    'account_type',
    'account_number',
    'transaction_type',
    'transaction_id',
    'description'
]


class ReceiptParser:
    """Turns an ExtractedReceipt into a NormalizedTransaction. No I/O."""

    @staticmethod
    def normalize(extracted: ExtractedReceipt) -> NormalizedTransaction:
        """
        Validate and clean extracted receipt data.

        Args:
            extracted: Raw extraction result

        Returns:
            Normalized transaction whose category belongs to its direction
        """
        direction = validate_direction(extracted.transaction_direction)
        if direction is None:
            if extracted.transaction_direction is not None:
                logger.warning(
                    f"Invalid direction {extracted.transaction_direction!r}, defaulting to expense"
                )
            direction = EXPENSE

        fields = {name: sanitize_string(getattr(extracted, name), max_length=500) for name in TEXT_FIELDS}

        commission = ReceiptParser.parse_amount(extracted.commission)
        tax = ReceiptParser.parse_amount(extracted.tax)
        total_fee = ReceiptParser.parse_amount(extracted.total_fee)

        # If total fee is missing but we have commission and tax, calculate it
        if total_fee is None and commission is not None and tax is not None:
            total_fee = round(commission + tax, 2)
            logger.info(f"Calculated total fee from commission and tax: {total_fee}")

        category = validate_category(extracted.suggested_category, direction)
        if category != extracted.suggested_category:
            logger.info(
                f"Category {extracted.suggested_category!r} not valid for {direction}, using {category!r}"
            )

        return NormalizedTransaction(
            direction=direction,
            amount=ReceiptParser.parse_amount(extracted.amount),
            currency=ReceiptParser._clean_currency(extracted.currency),
            recipient_iban=ReceiptParser._clean_iban(extracted.recipient_iban),
            sender_iban=ReceiptParser._clean_iban(extracted.sender_iban),
            commission=commission,
            tax=tax,
            total_fee=total_fee,
            date=ReceiptParser.parse_date(extracted.date),
            time=sanitize_string(extracted.time, max_length=16),
            category=category,
            raw_response=extracted.raw_response,
            **fields
        )

    @staticmethod
    def has_usable_content(extracted: ExtractedReceipt) -> bool:
        """
        Check whether an extraction is worth storing.

        A receipt is usable when it has a non-zero amount or names a
        recipient or sender.
        """
        amount = ReceiptParser.parse_amount(extracted.amount)
        if amount:
            return True
        return bool(sanitize_string(extracted.recipient) or sanitize_string(extracted.sender))

    @staticmethod
    def parse_amount(value: Any) -> Optional[float]:
        """
        Convert a monetary value to float.

        Strings may use either "." or "," as the decimal marker
        ("1.234,56" and "1,234.56" both give 1234.56). A single separator
        followed by exactly three digits is read as a thousands separator.

        Args:
            value: Number or text

        Returns:
            Positive amount rounded to 2 decimals, or None if not parseable
        """
        if value is None or isinstance(value, bool):
            return None

        if isinstance(value, (int, float)):
            number = float(value)
        elif isinstance(value, str):
            number = ReceiptParser._parse_amount_text(value)
            if number is None:
                logger.warning(f"Invalid amount value: {value!r}")
                return None
        else:
            logger.warning(f"Invalid amount type: {type(value).__name__}")
            return None

        if not math.isfinite(number):
            return None

        if number < 0:
            logger.warning(f"Negative amount detected: {number}")
            number = abs(number)

        return round(number, 2)

    @staticmethod
    def _parse_amount_text(text: str) -> Optional[float]:
        """Parse a locale-formatted amount string."""
        cleaned = _NON_NUMERIC.sub('', text)
        negative = cleaned.startswith('-')
        cleaned = cleaned.replace('-', '')

        if not any(char.isdigit() for char in cleaned):
            return None

        has_dot = '.' in cleaned
        has_comma = ',' in cleaned

        if has_dot and has_comma:
            decimal_mark = ',' if cleaned.rfind(',') > cleaned.rfind('.') else '.'
            thousands_mark = '.' if decimal_mark == ',' else ','
            cleaned = cleaned.replace(thousands_mark, '').replace(decimal_mark, '.')
        elif has_dot or has_comma:
            separator = '.' if has_dot else ','
            if cleaned.count(separator) > 1:
                cleaned = cleaned.replace(separator, '')
            else:
                integer_part, fraction_part = cleaned.split(separator)
                if len(fraction_part) == 3 and integer_part not in ('', '0'):
                    cleaned = integer_part + fraction_part
                else:
                    cleaned = f"{integer_part or '0'}.{fraction_part}"

        try:
            number = float(cleaned)
        except ValueError:
            return None

        return -number if negative else number

    @staticmethod
    def parse_date(value: Any) -> Optional[str]:
        """
        Normalize a date to YYYY-MM-DD.

        ISO dates are taken as-is; anything else is parsed day-first,
        so 05.01.2024 is the 5th of January.
        """
        date_str = sanitize_string(value, max_length=64)
        if not date_str:
            return None

        try:
            parsed = datetime.strptime(date_str[:10], '%Y-%m-%d')
        except ValueError:
            try:
                parsed = date_parser.parse(date_str, dayfirst=True)
            except (ValueError, OverflowError):
                logger.warning(f"Invalid date format: {date_str}")
                return None

        if parsed > datetime.utcnow():
            logger.warning(f"Future date detected: {date_str}")

        return parsed.strftime('%Y-%m-%d')

    @staticmethod
    def _clean_iban(value: Any) -> Optional[str]:
        """Remove whitespace from an IBAN."""
        iban = sanitize_string(value, max_length=64)
        if not iban:
            return None
        return iban.replace(' ', '').upper()

    @staticmethod
    def _clean_currency(value: Any) -> str:
        """Upper-case a currency code, defaulting to TRY."""
        currency = sanitize_string(value, max_length=8)
        if not currency:
            return DEFAULT_CURRENCY

        currency = currency.upper()
        if currency in ('TL', '₺'):
            return DEFAULT_CURRENCY
        if not _CURRENCY_CODE.match(currency):
            logger.warning(f"Unrecognised currency {currency!r}, using {DEFAULT_CURRENCY}")
            return DEFAULT_CURRENCY
        return currency
