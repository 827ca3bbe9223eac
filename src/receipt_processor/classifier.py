"""Routing of normalized transactions to the expense or income ledger."""

import logging

from shared.validators import INCOME, EXPENSE
from receipt_processor.models import Classification, NormalizedTransaction

logger = logging.getLogger(__name__)


class TransactionClassifier:
    """
    Decides which ledger a transaction belongs to.

    Routing is a plain dispatch on the normalized direction. New targets
    (transfers, refunds) are added here without touching normalization or
    persistence.
    """

    @staticmethod
    def classify(record: NormalizedTransaction) -> Classification:
        """
        Classify a normalized transaction.

        Args:
            record: Normalized transaction

        Returns:
            Classification with the persistence target
        """
        target = INCOME if record.direction == INCOME else EXPENSE
        logger.info(f"Routing {record.transaction_type or 'transaction'} to {target}")
        return Classification(target=target, record=record)
