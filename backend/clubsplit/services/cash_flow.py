"""Pure functions for debt settlement.

No database access, no async. Turns unpaid expense shares into debts,
debts into net balances, and net balances into a short list of transfers.
"""

from collections.abc import Iterable, Mapping, Sequence
from decimal import Decimal

from clubsplit.models.debt import (
    Debt,
    OptimizationSavings,
    OptimizedTransfer,
    UserBalance,
    UserTransferGroup,
)
from clubsplit.models.expense import Expense

# Balances and transfers at or below this amount are treated as settled.
SETTLEMENT_EPSILON = Decimal("0.01")
DEFAULT_CURRENCY_SYMBOL = "£"
UNKNOWN_USER_NAME = "Unknown User"


def _format_amount(amount: Decimal, currency_symbol: str) -> str:
    return f"{currency_symbol}{amount:.2f}"


def calculate_net_balances(debts: Iterable[Debt]) -> list[UserBalance]:
    """Compute the net balance of every user appearing in a list of debts.

    Args:
        debts: Debts to aggregate.

    Returns:
        One UserBalance per distinct user. Positive means the user is owed
        money overall, negative means they owe money. Order follows first
        appearance but callers should not rely on it.
    """
    balances: dict[str, Decimal] = {}

    for debt in debts:
        balances.setdefault(debt.from_user_id, Decimal("0"))
        balances.setdefault(debt.to_user_id, Decimal("0"))
        balances[debt.from_user_id] -= debt.amount
        balances[debt.to_user_id] += debt.amount

    return [
        UserBalance(user_id=user_id, net_amount=net_amount)
        for user_id, net_amount in balances.items()
    ]


def optimize_settlement(
    debts: Iterable[Debt],
    *,
    epsilon: Decimal = SETTLEMENT_EPSILON,
    currency_symbol: str = DEFAULT_CURRENCY_SYMBOL,
) -> list[OptimizedTransfer]:
    """Compute a minimal list of transfers that settles all debts.

    Greedy matching over sorted extremes: creditors largest first, debtors
    most negative first. Each step moves min(credit, |debt|) from the
    current debtor to the current creditor, so every transfer settles at
    least one side and at most N-1 transfers are produced for N users with
    a non-zero balance.

    Args:
        debts: Debts to settle.
        epsilon: Transfers at or below this amount are not emitted.
        currency_symbol: Prefix used in transfer descriptions.

    Returns:
        Transfers in the order the walk produces them (grouped by creditor).
    """
    balances = calculate_net_balances(debts)

    creditors = [[b.user_id, b.net_amount] for b in balances if b.net_amount > 0]
    creditors.sort(key=lambda c: c[1], reverse=True)
    debtors = [[b.user_id, b.net_amount] for b in balances if b.net_amount < 0]
    debtors.sort(key=lambda d: d[1])

    transfers: list[OptimizedTransfer] = []
    creditor_index = 0
    debtor_index = 0

    while creditor_index < len(creditors) and debtor_index < len(debtors):
        creditor = creditors[creditor_index]
        debtor = debtors[debtor_index]

        transfer_amount = min(creditor[1], abs(debtor[1]))

        if transfer_amount > epsilon:
            transfers.append(
                OptimizedTransfer(
                    from_user_id=debtor[0],
                    to_user_id=creditor[0],
                    amount=transfer_amount,
                    description=(
                        "Settlement transfer of "
                        f"{_format_amount(transfer_amount, currency_symbol)}"
                    ),
                )
            )
            creditor[1] -= transfer_amount
            debtor[1] += transfer_amount

        if creditor[1] <= epsilon:
            creditor_index += 1
        if abs(debtor[1]) <= epsilon:
            debtor_index += 1

    return transfers


def get_settlement_suggestions(
    user_id: str,
    debts: Iterable[Debt],
    user_names: Mapping[str, str],
    *,
    epsilon: Decimal = SETTLEMENT_EPSILON,
    currency_symbol: str = DEFAULT_CURRENCY_SYMBOL,
    unknown_user_name: str = UNKNOWN_USER_NAME,
) -> list[OptimizedTransfer]:
    """Return the optimized transfers that involve one user.

    Descriptions are rewritten from that user's point of view, e.g.
    "Pay £12.50 to Alice" or "Receive £12.50 from Bob".
    """
    suggestions: list[OptimizedTransfer] = []

    for transfer in optimize_settlement(
        debts, epsilon=epsilon, currency_symbol=currency_symbol
    ):
        amount = _format_amount(transfer.amount, currency_symbol)
        if transfer.from_user_id == user_id:
            other = user_names.get(transfer.to_user_id) or unknown_user_name
            description = f"Pay {amount} to {other}"
        elif transfer.to_user_id == user_id:
            other = user_names.get(transfer.from_user_id) or unknown_user_name
            description = f"Receive {amount} from {other}"
        else:
            continue
        suggestions.append(transfer.model_copy(update={"description": description}))

    return suggestions


def expenses_to_debts(expenses: Iterable[Expense]) -> list[Debt]:
    """Flatten expenses into one debt per unpaid, non-payer participant.

    Args:
        expenses: Expenses with their participant shares.

    Returns:
        Debts from each unpaid participant to the expense payer. The payer's
        own share never becomes a debt.
    """
    debts: list[Debt] = []

    for expense in expenses:
        for participant in expense.participants:
            if participant.is_paid or participant.user_id == expense.paid_by:
                continue
            debts.append(
                Debt(
                    from_user_id=participant.user_id,
                    to_user_id=expense.paid_by,
                    amount=participant.share_amount,
                )
            )

    return debts


def calculate_optimization_savings(
    original_debts: Sequence[Debt],
    optimized_transfers: Sequence[OptimizedTransfer],
) -> OptimizationSavings:
    """Compare the number of raw debts with the number of optimized transfers."""
    original_transactions = len(original_debts)
    optimized_transactions = len(optimized_transfers)
    transaction_reduction = original_transactions - optimized_transactions
    percentage_saved = (
        transaction_reduction / original_transactions * 100
        if original_transactions > 0
        else 0.0
    )

    return OptimizationSavings(
        original_transactions=original_transactions,
        optimized_transactions=optimized_transactions,
        transaction_reduction=transaction_reduction,
        percentage_saved=percentage_saved,
    )


def group_transfers_by_user(
    transfers: Iterable[OptimizedTransfer],
) -> dict[str, UserTransferGroup]:
    """File each transfer under its payer (outgoing) and its payee (incoming).

    Returns:
        Dict keyed by user_id. The net_amount of every group is the sum of
        incoming minus outgoing amounts, so all groups together sum to zero.
    """
    groups: dict[str, UserTransferGroup] = {}

    for transfer in transfers:
        from_group = groups.setdefault(transfer.from_user_id, UserTransferGroup())
        to_group = groups.setdefault(transfer.to_user_id, UserTransferGroup())

        from_group.outgoing.append(transfer)
        from_group.net_amount -= transfer.amount

        to_group.incoming.append(transfer)
        to_group.net_amount += transfer.amount

    return groups
