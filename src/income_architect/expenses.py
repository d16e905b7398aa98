"""Aggregation and editing of the recurring expense forest.

Expenses form a forest: each root is a category the user created, and
any node may carry sub-items. A node's annual value is its own amount
converted to a yearly figure plus the annual values of all its
descendants, so a container (amount 0) is worth exactly its subtree.

Edits never mutate a forest. Every edit walks the forest and returns a
new tuple of nodes, sharing the untouched subtrees with the input.
"""

from decimal import Decimal
from typing import Any, Callable, Iterable, Iterator, Optional, Union
from uuid import uuid4

import structlog

from .cadence import restate, to_annual
from .exceptions import ExpenseNotFoundError, ValidationError
from .models import Cadence, ExpenseNode, ExpenseSlice, to_decimal

logger = structlog.get_logger()

Forest = tuple[ExpenseNode, ...]

ZERO = Decimal("0")

# Floor for the color scale so a lone small expense is not drawn as the
# most expensive possible.
MIN_COLOR_SCALE = Decimal("100")

EDITABLE_FIELDS = frozenset({"label", "amount", "cadence", "color"})


# =============================================================================
# AGGREGATION
# =============================================================================

def annual_value(node: ExpenseNode) -> Decimal:
    """Annual cost of a node and everything beneath it.

    Expense amounts use the default 8 hour, 5 day schedule for hourly
    and daily cadences.
    """
    own = to_annual(node.amount, node.cadence)
    return own + sum((annual_value(child) for child in node.children), ZERO)


def flatten_expenses(forest: Iterable[ExpenseNode]) -> list[ExpenseSlice]:
    """One slice per root expense, in forest order.

    Sub-items are folded into their root's value rather than listed.
    Roots whose total is zero or less are left out.
    """
    slices = []
    for node in forest:
        value = annual_value(node)
        if value > 0:
            slices.append(ExpenseSlice(name=node.label, annual_value=value, color=node.color))
    return slices


def total_annual(forest: Iterable[ExpenseNode]) -> Decimal:
    """Sum of all root slices."""
    return sum((s.annual_value for s in flatten_expenses(forest)), ZERO)


def display_total(node: ExpenseNode) -> Decimal:
    """A node's total expressed at its own cadence, for display.

    The node's own amount is shown as entered; each direct child's own
    amount is annualized and rescaled to the node's cadence. Grandchildren
    are not included. Not used in annual aggregation.
    """
    children = sum(
        (restate(to_annual(child.amount, child.cadence), node.cadence) for child in node.children),
        ZERO,
    )
    return node.amount + children


def color_scale(forest: Iterable[ExpenseNode]) -> Decimal:
    """Largest root display total, with a floor of 100."""
    return max([display_total(node) for node in forest] + [MIN_COLOR_SCALE])


def spectral_color(amount: Any, max_amount: Any) -> str:
    """Map an amount to a hue from blue (cheap) to red (most expensive).

    A ratio of 1.0 is hue 0 (red) and 0.0 is hue 240 (blue).
    """
    value = to_decimal(amount) or ZERO
    scale = to_decimal(max_amount) or Decimal("1")
    ratio = min(Decimal("1"), max(ZERO, value / scale))
    hue = float(240 * (1 - ratio))
    return f"hsl({hue:g}, 75%, 50%)"


# =============================================================================
# LOOKUP
# =============================================================================

def iter_expenses(forest: Iterable[ExpenseNode], depth: int = 0) -> Iterator[tuple[int, ExpenseNode]]:
    """Yield (depth, node) for every node, depth-first in display order."""
    for node in forest:
        yield depth, node
        yield from iter_expenses(node.children, depth + 1)


def find_expense(forest: Iterable[ExpenseNode], expense_id: str) -> Optional[ExpenseNode]:
    """Return the node with `expense_id`, or None."""
    for _, node in iter_expenses(forest):
        if node.id == expense_id:
            return node
    return None


# =============================================================================
# EDITING
# =============================================================================

def new_expense_id() -> str:
    """Random opaque id for a new node."""
    return uuid4().hex[:9]


def new_expense(
    label: str,
    amount: Any = 0,
    cadence: Union[Cadence, str] = Cadence.MONTHLY,
    color: Optional[str] = None,
    children: Iterable[ExpenseNode] = (),
    expense_id: Optional[str] = None,
) -> ExpenseNode:
    """Build a node. Without a color, it is shaded against its own amount."""
    node = ExpenseNode(
        id=expense_id or new_expense_id(),
        label=label,
        amount=amount,
        cadence=cadence,
        color=color or "",
        children=tuple(children),
    )
    if not node.color:
        node = node.model_copy(update={"color": spectral_color(node.amount, node.amount)})
    return node


def _rebuild(
    nodes: Iterable[ExpenseNode],
    expense_id: str,
    transform: Callable[[ExpenseNode], Optional[ExpenseNode]],
) -> tuple[Forest, bool]:
    """Copy `nodes` with the node matching `expense_id` transformed.

    A transform returning None drops the node. Only ancestors of the
    match are copied; other subtrees are reused.
    """
    found = False
    rebuilt = []
    for node in nodes:
        if node.id == expense_id:
            found = True
            replacement = transform(node)
            if replacement is not None:
                rebuilt.append(replacement)
            continue
        children, child_found = _rebuild(node.children, expense_id, transform)
        if child_found:
            found = True
            node = node.model_copy(update={"children": children})
        rebuilt.append(node)
    return tuple(rebuilt), found


def add_expense(
    forest: Iterable[ExpenseNode],
    node: ExpenseNode,
    parent_id: Optional[str] = None,
) -> Forest:
    """Append `node` as a root, or as the last child of `parent_id`.

    Raises:
        ValidationError: If `node` or any of its descendants reuses an id.
        ExpenseNotFoundError: If `parent_id` is not in the forest.
    """
    forest = tuple(forest)
    existing = {n.id for _, n in iter_expenses(forest)}
    for _, incoming in iter_expenses((node,)):
        if incoming.id in existing:
            raise ValidationError(
                "Expense id already in use",
                field="id",
                value=incoming.id,
                constraint="Ids must be unique within a forest",
            )
        existing.add(incoming.id)

    if parent_id is None:
        logger.debug("expense_added", expense_id=node.id, label=node.label)
        return forest + (node,)

    updated, found = _rebuild(
        forest,
        parent_id,
        lambda parent: parent.model_copy(update={"children": parent.children + (node,)}),
    )
    if not found:
        raise ExpenseNotFoundError(parent_id, operation="add_expense")
    logger.debug("expense_added", expense_id=node.id, label=node.label, parent_id=parent_id)
    return updated


def create_expense(
    forest: Iterable[ExpenseNode],
    label: str,
    amount: Any = 0,
    cadence: Union[Cadence, str] = Cadence.MONTHLY,
    parent_id: Optional[str] = None,
) -> tuple[Forest, ExpenseNode]:
    """Create a node the way a user adds one, and insert it.

    Sub-items take their parent's cadence. The color is shaded against
    the largest root in the forest. Returns the new forest and the node.
    """
    forest = tuple(forest)
    if parent_id is not None:
        parent = find_expense(forest, parent_id)
        if parent is None:
            raise ExpenseNotFoundError(parent_id, operation="create_expense")
        cadence = parent.cadence

    node = new_expense(label, amount=amount, cadence=cadence)
    node = node.model_copy(update={"color": spectral_color(node.amount, color_scale(forest))})
    return add_expense(forest, node, parent_id=parent_id), node


def remove_expense(forest: Iterable[ExpenseNode], expense_id: str) -> Forest:
    """Drop a node and its whole subtree, wherever it is.

    Raises:
        ExpenseNotFoundError: If `expense_id` is not in the forest.
    """
    updated, found = _rebuild(forest, expense_id, lambda node: None)
    if not found:
        raise ExpenseNotFoundError(expense_id, operation="remove_expense")
    logger.debug("expense_removed", expense_id=expense_id)
    return updated


def update_expense(forest: Iterable[ExpenseNode], expense_id: str, **changes: Any) -> Forest:
    """Replace label, amount, cadence or color of one node.

    Raises:
        ValidationError: If a change names any other field.
        ExpenseNotFoundError: If `expense_id` is not in the forest.
    """
    unknown = set(changes) - EDITABLE_FIELDS
    if unknown:
        raise ValidationError(
            "Cannot update expense field",
            field=sorted(unknown)[0],
            constraint=f"Must be one of: {', '.join(sorted(EDITABLE_FIELDS))}",
        )

    def apply(node: ExpenseNode) -> ExpenseNode:
        fields = node.model_dump(exclude={"children"})
        fields.update(changes)
        fields["children"] = node.children
        return ExpenseNode.model_validate(fields)

    updated, found = _rebuild(forest, expense_id, apply)
    if not found:
        raise ExpenseNotFoundError(expense_id, operation="update_expense")
    logger.debug("expense_updated", expense_id=expense_id, fields=sorted(changes))
    return updated
