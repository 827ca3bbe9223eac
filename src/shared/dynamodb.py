"""DynamoDB table wrapper for the ledger tables."""

from typing import Any, Dict, Iterator, List, Optional
from decimal import Decimal
from botocore.exceptions import BotoCoreError, ClientError
import logging

from .aws import resource
from .exceptions import DatabaseError

logger = logging.getLogger(__name__)


def to_dynamodb(value: Any) -> Any:
    """Floats become Decimal; DynamoDB rejects binary floats."""
    if isinstance(value, dict):
        return {k: to_dynamodb(v) for k, v in value.items()}
    if isinstance(value, list):
        return [to_dynamodb(v) for v in value]
    if isinstance(value, float):
        return Decimal(str(value))
    return value


def from_dynamodb(value: Any) -> Any:
    """Decimals come back as int when whole, float otherwise."""
    if isinstance(value, dict):
        return {k: from_dynamodb(v) for k, v in value.items()}
    if isinstance(value, list):
        return [from_dynamodb(v) for v in value]
    if isinstance(value, Decimal):
        return int(value) if value % 1 == 0 else float(value)
    return value


class DynamoDBClient:
    """One ledger table: expenses, incomes or users."""

    def __init__(self, table_name: str, region_name: Optional[str] = None):
        """
        Bind to a table.

        Args:
            table_name: Name of the DynamoDB table
            region_name: Optional AWS region
        """
        self.table_name = table_name
        self.table = resource('dynamodb', region_name).Table(table_name)

    def put_item(self, item: Dict[str, Any]) -> Dict[str, Any]:
        """
        Insert or replace a row.

        Args:
            item: Row in Python types

        Returns:
            The row as given

        Raises:
            DatabaseError: If the write fails
        """
        try:
            self.table.put_item(Item=to_dynamodb(item))
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error writing to {self.table_name}: {e}")
            raise DatabaseError(f"Failed to put item: {str(e)}")
        return item

    def get_item(self, key: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Fetch a row by primary key.

        Raises:
            DatabaseError: If the read fails
        """
        try:
            item = self.table.get_item(Key=key).get('Item')
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error reading from {self.table_name}: {e}")
            raise DatabaseError(f"Failed to get item: {str(e)}")
        return from_dynamodb(item) if item else None

    def iter_items(self, filter_expression: Optional[Any] = None) -> Iterator[Dict[str, Any]]:
        """
        Scan the table page by page.

        Args:
            filter_expression: Optional boto3 condition

        Yields:
            Matching rows in Python types

        Raises:
            DatabaseError: If a page cannot be read
        """
        kwargs: Dict[str, Any] = {}
        if filter_expression is not None:
            kwargs['FilterExpression'] = filter_expression

        while True:
            try:
                page = self.table.scan(**kwargs)
            except (ClientError, BotoCoreError) as e:
                logger.error(f"Error scanning {self.table_name}: {e}")
                raise DatabaseError(f"Failed to scan items: {str(e)}")

            for item in page.get('Items', []):
                yield from_dynamodb(item)

            if 'LastEvaluatedKey' not in page:
                return
            kwargs['ExclusiveStartKey'] = page['LastEvaluatedKey']

    def scan_all(self, filter_expression: Optional[Any] = None) -> List[Dict[str, Any]]:
        """All rows matching the filter."""
        return list(self.iter_items(filter_expression))
