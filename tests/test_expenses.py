"""Tests for expense aggregation and forest editing."""

from decimal import Decimal

import pytest

from income_architect.exceptions import ExpenseNotFoundError, ValidationError
from income_architect.expenses import (
    add_expense,
    annual_value,
    color_scale,
    create_expense,
    display_total,
    find_expense,
    flatten_expenses,
    iter_expenses,
    new_expense,
    remove_expense,
    spectral_color,
    total_annual,
    update_expense,
)
from income_architect.models import Cadence, ExpenseNode, ExpenseSlice


class TestAnnualValue:
    """Test suite for recursive aggregation."""

    def test_three_level_tree(self, three_level_tree: ExpenseNode):
        """A container is worth its whole subtree: 1200 + 100 x 12."""
        assert annual_value(three_level_tree) == Decimal("2400")

    def test_own_amount_and_children_both_count(self):
        """A non-zero parent adds its own amount to its children's."""
        node = ExpenseNode(
            id="car",
            label="Car",
            amount=Decimal("300"),
            cadence=Cadence.MONTHLY,
            children=(ExpenseNode(id="ins", label="Insurance", amount=Decimal("600"), cadence=Cadence.YEARLY),),
        )
        assert annual_value(node) == Decimal("4200")

    def test_leaf(self):
        node = ExpenseNode(id="x", label="Gym", amount=Decimal("25"), cadence=Cadence.WEEKLY)
        assert annual_value(node) == Decimal("1300")

    def test_hourly_expense_uses_default_schedule(self):
        node = ExpenseNode(id="x", label="Parking", amount=Decimal("2"), cadence=Cadence.HOURLY)
        assert annual_value(node) == Decimal("4160")

    def test_unknown_cadence_contributes_nothing(self):
        node = ExpenseNode(id="x", label="Odd", amount=Decimal("10"), cadence="Fortnightly")
        assert annual_value(node) == 0


class TestFlattenExpenses:
    """Test suite for flatten_expenses."""

    def test_single_root(self, three_level_tree: ExpenseNode):
        """Only the root is emitted, carrying its subtree total."""
        assert flatten_expenses([three_level_tree]) == [
            ExpenseSlice(name="A", annual_value=Decimal("2400"), color="#f00"),
        ]

    def test_zero_value_roots_dropped(self, household_forest):
        """Empty containers are left out entirely."""
        slices = flatten_expenses(household_forest)

        assert [s.name for s in slices] == ["A", "Rent"]
        assert slices[1].annual_value == Decimal("18000")

    def test_empty_forest(self):
        assert flatten_expenses([]) == []
        assert total_annual([]) == 0

    def test_total(self, household_forest):
        assert total_annual(household_forest) == Decimal("20400")


class TestDisplayTotal:
    """Test suite for the display-only rescale."""

    def test_children_rescaled_to_parent_cadence(self):
        """A monthly parent shows yearly children divided by 12."""
        node = ExpenseNode(
            id="p",
            label="Subscriptions",
            amount=Decimal("100"),
            cadence=Cadence.MONTHLY,
            children=(ExpenseNode(id="c", label="Domain", amount=Decimal("1200"), cadence=Cadence.YEARLY),),
        )
        assert display_total(node) == Decimal("200")

    def test_only_direct_children_are_rescaled(self, three_level_tree: ExpenseNode):
        """A row shows its children's own amounts; grandchildren are not added."""
        assert display_total(three_level_tree) == Decimal("100")
        assert display_total(three_level_tree.children[0]) == Decimal("2400")

    def test_leaf_shows_amount_as_entered(self):
        node = ExpenseNode(id="x", label="Coffee", amount=Decimal("4"), cadence=Cadence.DAILY)
        assert display_total(node) == Decimal("4")

    def test_does_not_change_annual_value(self, three_level_tree: ExpenseNode):
        display_total(three_level_tree)
        assert annual_value(three_level_tree) == Decimal("2400")

    def test_color_scale_floor(self):
        small = ExpenseNode(id="x", label="Tea", amount=Decimal("5"))
        assert color_scale([small]) == Decimal("100")
        assert color_scale([]) == Decimal("100")


class TestSpectralColor:
    """Test suite for spectral_color."""

    def test_extremes(self):
        assert spectral_color(Decimal("0"), Decimal("100")) == "hsl(240, 75%, 50%)"
        assert spectral_color(Decimal("100"), Decimal("100")) == "hsl(0, 75%, 50%)"

    def test_midpoint(self):
        assert spectral_color(Decimal("50"), Decimal("100")) == "hsl(120, 75%, 50%)"

    def test_clamped_and_zero_scale(self):
        assert spectral_color(Decimal("500"), Decimal("100")) == "hsl(0, 75%, 50%)"
        assert spectral_color(Decimal("0"), Decimal("0")) == "hsl(240, 75%, 50%)"


class TestForestLookup:
    """Test suite for find_expense and iter_expenses."""

    def test_find_nested(self, household_forest):
        assert find_expense(household_forest, "c").label == "C"
        assert find_expense(household_forest, "nope") is None

    def test_iter_depth_first(self, household_forest):
        assert [(d, n.id) for d, n in iter_expenses(household_forest)] == [
            (0, "a"), (1, "b"), (2, "c"), (0, "rent"), (0, "misc"),
        ]


class TestForestEditing:
    """Test suite for add, remove and update."""

    def test_add_root(self, household_forest):
        node = new_expense("Phone", Decimal("60"), expense_id="phone")
        updated = add_expense(household_forest, node)

        assert [n.id for n in updated] == ["a", "rent", "misc", "phone"]
        assert len(household_forest) == 3

    def test_add_child_to_nested_node(self, household_forest):
        node = new_expense("D", Decimal("10"), Cadence.MONTHLY, expense_id="d")
        updated = add_expense(household_forest, node, parent_id="b")

        b = find_expense(updated, "b")
        assert [c.id for c in b.children] == ["c", "d"]
        assert annual_value(updated[0]) == Decimal("2520")
        # The input forest is untouched
        assert [c.id for c in find_expense(household_forest, "b").children] == ["c"]

    def test_untouched_subtrees_are_shared(self, household_forest):
        updated = update_expense(household_forest, "c", color="#123456")
        assert updated[1] is household_forest[1]
        assert updated[0] is not household_forest[0]

    def test_add_to_unknown_parent(self, household_forest):
        node = new_expense("X", expense_id="x")
        with pytest.raises(ExpenseNotFoundError) as exc_info:
            add_expense(household_forest, node, parent_id="ghost")
        assert exc_info.value.expense_id == "ghost"
        assert exc_info.value.details["operation"] == "add_expense"

    def test_add_duplicate_id(self, household_forest):
        node = new_expense("Again", expense_id="c")
        with pytest.raises(ValidationError):
            add_expense(household_forest, node)

    def test_add_subtree_with_duplicate_descendant_id(self, household_forest):
        """Ids inside an added subtree must be new as well."""
        clash = new_expense("Dup", expense_id="c")
        node = new_expense("Fresh", children=[clash], expense_id="fresh")

        with pytest.raises(ValidationError) as exc_info:
            add_expense(household_forest, node)
        assert exc_info.value.details["value"] == "c"

    def test_add_subtree_with_repeated_id(self):
        child = new_expense("Child", expense_id="x")
        node = new_expense("Parent", children=[child], expense_id="x")

        with pytest.raises(ValidationError):
            add_expense((), node)

    def test_remove_nested_drops_subtree(self, household_forest):
        updated = remove_expense(household_forest, "b")

        assert find_expense(updated, "b") is None
        assert find_expense(updated, "c") is None
        assert annual_value(updated[0]) == 0
        assert find_expense(household_forest, "c") is not None

    def test_remove_root(self, household_forest):
        updated = remove_expense(household_forest, "rent")
        assert [n.id for n in updated] == ["a", "misc"]

    def test_remove_unknown(self, household_forest):
        with pytest.raises(ExpenseNotFoundError):
            remove_expense(household_forest, "ghost")

    def test_update_color(self, household_forest):
        updated = update_expense(household_forest, "c", color="#abcdef")
        node = find_expense(updated, "c")

        assert node.color == "#abcdef"
        assert node.amount == Decimal("100")

    def test_update_amount_is_validated(self, household_forest):
        """Edits go through the same coercion as new nodes."""
        updated = update_expense(household_forest, "rent", amount="1750.50")
        assert find_expense(updated, "rent").amount == Decimal("1750.50")

        updated = update_expense(household_forest, "rent", amount="oops")
        assert find_expense(updated, "rent").amount == 0

    def test_update_keeps_children(self, household_forest):
        updated = update_expense(household_forest, "b", label="B2")
        b = find_expense(updated, "b")
        assert b.label == "B2"
        assert [c.id for c in b.children] == ["c"]

    def test_update_rejects_other_fields(self, household_forest):
        with pytest.raises(ValidationError) as exc_info:
            update_expense(household_forest, "rent", id="new-id")
        assert exc_info.value.field == "id"

    def test_update_unknown(self, household_forest):
        with pytest.raises(ExpenseNotFoundError):
            update_expense(household_forest, "ghost", color="#000")


class TestCreateExpense:
    """Test suite for create_expense."""

    def test_new_ids_are_unique(self):
        ids = {new_expense("x").id for _ in range(50)}
        assert len(ids) == 50
        assert all(len(i) == 9 for i in ids)

    def test_sub_item_takes_parent_cadence(self, household_forest):
        updated, node = create_expense(
            household_forest, "Water", Decimal("40"), Cadence.YEARLY, parent_id="rent"
        )

        assert node.cadence == Cadence.MONTHLY
        assert find_expense(updated, "rent").children == (node,)

    def test_color_scaled_against_largest_root(self, household_forest):
        """Rent displays at 1500/month, so 750 is half way."""
        _, node = create_expense(household_forest, "Daycare", Decimal("750"))
        assert node.color == "hsl(120, 75%, 50%)"

    def test_container_from_empty_forest(self):
        forest, node = create_expense((), "Housing")

        assert forest == (node,)
        assert node.is_container
        assert node.color == "hsl(240, 75%, 50%)"

    def test_unknown_parent(self):
        with pytest.raises(ExpenseNotFoundError):
            create_expense((), "Orphan", parent_id="ghost")
