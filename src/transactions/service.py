"""Transaction service for persisting expenses and incomes."""

import json
import uuid
from typing import Dict, Any, List, Optional
from datetime import datetime, date
from collections import defaultdict
import logging
from boto3.dynamodb.conditions import Attr

from shared.config import Settings
from shared.dynamodb import DynamoDBClient
from shared.exceptions import NoSystemUserError, NotFoundError
from shared.validators import INCOME, EXPENSE
from receipt_processor.models import Classification, NormalizedTransaction
from receipts.models import StoredReceipt
from transactions.models import UNKNOWN, Expense, Income, Transaction

logger = logging.getLogger(__name__)

ADMIN_ROLE = 'admin'


class TransactionService:
    """Service for writing and reading expense and income records."""

    def __init__(
        self,
        expenses_table: DynamoDBClient,
        incomes_table: DynamoDBClient,
        users_table: DynamoDBClient
    ):
        """Initialize transaction service."""
        self.expenses_table = expenses_table
        self.incomes_table = incomes_table
        self.users_table = users_table

    @classmethod
    def from_settings(cls, settings: Settings) -> 'TransactionService':
        """Build the service against the configured tables."""
        return cls(
            expenses_table=DynamoDBClient(settings.expenses_table, region_name=settings.aws_region),
            incomes_table=DynamoDBClient(settings.incomes_table, region_name=settings.aws_region),
            users_table=DynamoDBClient(settings.users_table, region_name=settings.aws_region)
        )

    def resolve_owner(self, telegram_id: Optional[str]) -> str:
        """
        Find the user who owns transactions sent from a Telegram account.

        Args:
            telegram_id: Sender's Telegram user ID

        Returns:
            User ID of the mapped user, or of the first administrator

        Raises:
            NoSystemUserError: If there is neither a mapped user nor an admin
        """
        if telegram_id:
            users = self.users_table.scan_all(Attr('telegram_id').eq(str(telegram_id)))
            if users:
                return users[0]['user_id']

        admins = self.users_table.scan_all(Attr('role').eq(ADMIN_ROLE))
        if not admins:
            raise NoSystemUserError()

        # Scan order is undefined; the earliest admin is the system account
        admins.sort(key=lambda user: (user.get('created_at') or '', user['user_id']))
        logger.info(f"No user mapped to Telegram ID {telegram_id}, using admin {admins[0]['user_id']}")
        return admins[0]['user_id']

    def save(
        self,
        classification: Classification,
        receipt: StoredReceipt,
        receipt_type: str,
        telegram_id: Optional[str]
    ) -> Transaction:
        """
        Persist a classified transaction in the matching table.

        Args:
            classification: Routing decision and normalized record
            receipt: Stored receipt file
            receipt_type: Receipt file extension
            telegram_id: Sender's Telegram user ID

        Returns:
            The created Expense or Income
        """
        owner_id = self.resolve_owner(telegram_id)

        if classification.target == INCOME:
            return self.create_income(classification.record, receipt, receipt_type, owner_id)
        return self.create_expense(classification.record, receipt, receipt_type, owner_id)

    def create_expense(
        self,
        record: NormalizedTransaction,
        receipt: StoredReceipt,
        receipt_type: str,
        owner_id: str
    ) -> Expense:
        """
        Create an expense record.

        Raises:
            DatabaseError: If the write fails
        """
        fields = self._base_fields(record, receipt, receipt_type, owner_id)
        fields['recipient'] = record.recipient or UNKNOWN

        expense = Expense(**fields)
        self.expenses_table.put_item(expense.model_dump())

        logger.info(f"Created expense record: {expense.id}")
        return expense

    def create_income(
        self,
        record: NormalizedTransaction,
        receipt: StoredReceipt,
        receipt_type: str,
        owner_id: str
    ) -> Income:
        """
        Create an income record.

        Raises:
            DatabaseError: If the write fails
        """
        fields = self._base_fields(record, receipt, receipt_type, owner_id)
        fields['sender'] = record.sender or UNKNOWN

        income = Income(**fields)
        self.incomes_table.put_item(income.model_dump())

        logger.info(f"Created income record: {income.id}")
        return income

    def get_transaction(self, kind: str, transaction_id: str) -> Dict[str, Any]:
        """
        Get an expense or income by ID.

        Raises:
            NotFoundError: If the record does not exist
        """
        table = self._table_for(kind)
        item = table.get_item({'id': transaction_id})

        if not item:
            raise NotFoundError(f"{kind.capitalize()} not found")

        return item

    def list_recent(self, limit: int = 5) -> List[Dict[str, Any]]:
        """
        List the most recently created expenses and incomes together.

        Each item carries a 'kind' key ("expense" or "income").
        """
        items = []
        for kind in (EXPENSE, INCOME):
            for item in self._table_for(kind).scan_all():
                item['kind'] = kind
                items.append(item)

        items.sort(key=lambda item: item.get('created_at', ''), reverse=True)
        return items[:limit]

    def monthly_summary(self, year: int, month: int) -> Dict[str, Any]:
        """
        Summarize one calendar month.

        Args:
            year: Year
            month: Month (1-12)

        Returns:
            Expense totals, fee totals, counts, top expense categories and income total
        """
        start_date = date(year, month, 1).isoformat()
        end_date = (date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)).isoformat()
        in_month = Attr('date').gte(start_date) & Attr('date').lt(end_date)

        expenses = self.expenses_table.scan_all(in_month)
        incomes = self.incomes_table.scan_all(in_month)

        total_amount = 0.0
        total_fee = 0.0
        by_category = defaultdict(float)

        for expense in expenses:
            amount = float(expense.get('amount') or 0)
            total_amount += amount
            total_fee += float(expense.get('total_fee') or 0)
            by_category[expense.get('category', 'Diğer')] += amount

        income_total = sum(float(income.get('amount') or 0) for income in incomes)

        top_categories = sorted(by_category.items(), key=lambda pair: pair[1], reverse=True)[:5]

        return {
            'start_date': start_date,
            'end_date': end_date,
            'expense_total': round(total_amount, 2),
            'fee_total': round(total_fee, 2),
            'expense_count': len(expenses),
            'income_total': round(income_total, 2),
            'income_count': len(incomes),
            'top_categories': [(name, round(total, 2)) for name, total in top_categories]
        }

    def _table_for(self, kind: str) -> DynamoDBClient:
        if kind == INCOME:
            return self.incomes_table
        if kind == EXPENSE:
            return self.expenses_table
        raise NotFoundError(f"Unknown transaction kind: {kind}")

    @staticmethod
    def _base_fields(
        record: NormalizedTransaction,
        receipt: StoredReceipt,
        receipt_type: str,
        owner_id: str
    ) -> Dict[str, Any]:
        now = datetime.utcnow().isoformat()

        fields = record.model_dump(exclude={'direction', 'raw_response'})
        fields.update({
            'id': str(uuid.uuid4()),
            'bank': record.bank or UNKNOWN,
            'date': record.date or datetime.utcnow().strftime('%Y-%m-%d'),
            'receipt_path': receipt.path,
            'receipt_type': receipt_type,
            'receipt_storage_id': receipt.storage_id,
            'ai_raw_response': json.dumps(record.raw_response, ensure_ascii=False),
            'is_manual': False,
            'user_id': owner_id,
            'created_at': now,
            'updated_at': now
        })
        return fields
