"""Credit card bill settlement."""

from datetime import date
from typing import Optional
from uuid import uuid4

import structlog

from .exceptions import FundsSourceError, ValidationError
from .models import Account, AccountType, LedgerState, Transaction, TransactionCategory

logger = structlog.get_logger()


def find_payment_source(state: LedgerState) -> Optional[Account]:
    """The default checking account, else the first checking account."""
    checking = state.checking_accounts()
    return next((a for a in checking if a.is_default), None) or next(iter(checking), None)


def pay_bill(
    state: LedgerState,
    credit_account_id: str,
    on: Optional[date] = None,
) -> LedgerState:
    """Settle the full debt of a credit account from checking.

    A credit account that owes nothing is left alone and the same state is
    returned. The paying account may go negative.

    Raises:
        ValidationError: If the account does not exist or is not a credit account.
        FundsSourceError: If there is no checking account to pay from.
    """
    account = state.find_account(credit_account_id)
    if account is None:
        raise ValidationError("Account not found", field="credit_account_id", value=credit_account_id)
    if account.type != AccountType.CREDIT:
        raise ValidationError(
            "Only credit accounts have bills to pay",
            field="credit_account_id",
            value=credit_account_id,
            constraint="type == credit",
        )
    if account.balance >= 0:
        logger.info("bill_payment_skipped", account_id=account.id, balance=str(account.balance))
        return state

    payer = find_payment_source(state)
    if payer is None:
        raise FundsSourceError(
            "A checking account is required to pay the card bill",
            account_id=account.id,
            required_type=AccountType.CHECKING.value,
        )

    owed = -account.balance
    payment = Transaction(
        id=f"txn_{uuid4().hex[:12]}",
        account_id=payer.id,
        date=on or date.today(),
        amount=-owed,
        merchant=f"Pagamento Fatura {account.name}",
        category=TransactionCategory.BILLS,
        owner=account.owner,
    )
    new_state = state.with_balance_deltas({account.id: owed, payer.id: -owed}).with_transactions(
        [payment]
    )
    logger.info(
        "bill_paid",
        account_id=account.id,
        paying_account_id=payer.id,
        amount=str(owed),
    )
    return new_state


__all__ = ["find_payment_source", "pay_bill"]
