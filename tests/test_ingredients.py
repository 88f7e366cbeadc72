"""
Tests for the ingredient section.

These tests validate that:
- Every ingredient shape yields the right amount, name and link
- Headings turn the following list into a named group
- Headings without a list, empty names and stray blocks are rejected
"""

import pytest
from recipe_markdown.exceptions import RecipeParseError
from recipe_markdown.models.recipe import Amount, FractionFactor, Ingredient, IngredientGroup, IntegerFactor
from recipe_markdown.services.ingredients import classify_ingredient, parse_ingredient, parse_ingredients
from recipe_markdown.services.nodes import Node, NodeBuilder
from recipe_markdown.services.spans import Span


def _groups(section: str) -> list:
    """Parse an ingredient section on its own."""
    return parse_ingredients(NodeBuilder(section))


def _ingredient(item: str) -> Ingredient:
    """Parse a single list item line."""
    [group] = _groups(item)
    [ingredient] = group.ingredients
    return ingredient


def _error(section: str) -> RecipeParseError:
    with pytest.raises(RecipeParseError) as exc_info:
        _groups(section)
    return exc_info.value


def _node(kind: str, text=None) -> Node:
    return Node(kind, Span(0, 1), text=text)


# ═══════════════════════════════════════════════════════════════════
# SHAPES
# ═══════════════════════════════════════════════════════════════════

class TestClassifyIngredient:

    @pytest.mark.parametrize("kinds, shape", [
        ([], "empty"),
        (["emphasis"], "empty"),
        (["paragraph"], "wrapped"),
        (["emphasis", "link"], "amount_link"),
        (["emphasis", "text"], "amount_name"),
        (["emphasis", "text", "text"], "amount_name"),
        (["link"], "link"),
        (["text"], "name"),
        (["link", "text"], "name"),
    ])
    def test_shape(self, kinds, shape):
        """Children are matched against the shapes in order."""
        assert classify_ingredient([_node(kind) for kind in kinds]).shape == shape

    def test_single_space_before_link(self):
        """A single space between amount and link still makes an amount link."""
        children = [_node("emphasis"), _node("text", " "), _node("link")]
        classified = classify_ingredient(children)
        assert classified.shape == "amount_link"
        assert classified.link is children[2]

    def test_other_text_before_link(self):
        """Anything but a single space between amount and link makes a name."""
        children = [_node("emphasis"), _node("text", " of "), _node("link")]
        assert classify_ingredient(children).shape == "amount_name"


# ═══════════════════════════════════════════════════════════════════
# INGREDIENTS
# ═══════════════════════════════════════════════════════════════════

class TestParseIngredient:

    def test_amount_and_name(self):
        """The leading emphasis is the amount, the rest the name."""
        assert _ingredient("- *2 cups* flour, sifted\n") == Ingredient(
            amount=Amount(factor=IntegerFactor(value=2), unit="cups"),
            name="flour, sifted",
        )

    def test_name_only(self):
        """Plain text is the name."""
        assert _ingredient("- salt\n") == Ingredient(name="salt")

    def test_name_keeps_markup(self):
        """Names are sliced from the source, inline markup included."""
        assert _ingredient("- salt **or** pepper\n").name == "salt **or** pepper"

    def test_link(self):
        """A link on its own gives name and link."""
        assert _ingredient("- [salt](https://example.org/salt)\n") == Ingredient(
            name="salt",
            link="https://example.org/salt",
        )

    def test_amount_and_link(self):
        """An amount followed by a link gives all three parts."""
        assert _ingredient("- *1/2* [dough](./dough.md)\n") == Ingredient(
            amount=Amount(factor=FractionFactor(numerator=1, denominator=2)),
            name="dough",
            link="./dough.md",
        )

    def test_amount_directly_before_link(self):
        """The space between amount and link is optional."""
        ingredient = _ingredient("- *1*[dough](./dough.md)\n")
        assert ingredient.name == "dough"
        assert ingredient.amount == Amount(factor=IntegerFactor(value=1))

    def test_link_is_escaped(self):
        """Link destinations are escaped for use in an href."""
        ingredient = _ingredient("- [salt](https://example.org/salt?a=1&b='2')\n")
        assert ingredient.link == "https://example.org/salt?a=1&amp;b=&#x27;2&#x27;"

    def test_file_link(self):
        """Links to local files are kept like any other link."""
        ingredient = _ingredient("- *1* [stock](file:///recipes/stock.md)\n")
        assert ingredient.name == "stock"
        assert ingredient.link == "file:///recipes/stock.md"
        assert ingredient.amount == Amount(factor=IntegerFactor(value=1))

    @pytest.mark.parametrize("destination, link", [
        ("http://bücher.de/a", "http://b%C3%BCcher.de/a"),
        ("./50%-rye.md", "./50%-rye.md"),
        ("javascript:void(0)", "javascript:void(0)"),
    ])
    def test_link_is_escaped_once(self, destination, link):
        """Destinations reach the href escaping exactly as written."""
        assert _ingredient(f"- [bread]({destination})\n").link == link

    def test_unmatched_delimiters(self):
        """Delimiters that open nothing stay part of the name."""
        ingredient = _ingredient("- ** salt\n")
        assert ingredient.name == "** salt"

    def test_amount_without_number(self):
        """An amount without a number keeps its text as unit."""
        ingredient = _ingredient("- *a pinch* salt\n")
        assert ingredient.amount == Amount(unit="a pinch")
        assert ingredient.name == "salt"

    def test_loose_list(self):
        """Items of loose lists parse the same as tight ones."""
        [group] = _groups("- *1* glass\n\n- water\n")
        assert group.ingredients == [
            Ingredient(amount=Amount(factor=IntegerFactor(value=1)), name="glass"),
            Ingredient(name="water"),
        ]

    def test_sublist_is_part_of_the_name(self):
        """Nested lists are kept in the name verbatim."""
        assert _ingredient("- a\n  - b\n").name == "a\n  - b"

    def test_rejects_other_nodes(self):
        """Only list items and paragraphs can be ingredients."""
        with pytest.raises(ValueError):
            parse_ingredient("---", Node("horizontal_line", Span(0, 3)))


class TestParseIngredientErrors:

    def test_amount_only(self):
        """An amount without a name is an empty ingredient."""
        error = _error("- *1*\n")
        assert error.kind == "empty_ingredient"
        assert error.span == Span(0, 6)

    def test_only_delimiters(self):
        """Stray emphasis delimiters don't make a name."""
        error = _error("- **  **\n")
        assert error.kind == "empty_ingredient"
        assert error.span == Span(0, 9)

    def test_empty_link_text(self):
        """A link without text has no name."""
        error = _error("- *1* [](./dough.md)\n")
        assert error.kind == "empty_ingredient"
        assert error.span == Span(6, 20)

    def test_empty_link_text_before_amount(self):
        """A link without text is reported before its amount is parsed."""
        error = _error("- *1/0* [](x)\n")
        assert error.kind == "empty_ingredient"
        assert error.span == Span(8, 13)

    def test_invalid_amount(self):
        """Amount errors point at the amount text."""
        error = _error("- *1/0* salt\n")
        assert error.kind == "invalid_amount"
        assert error.span == Span(3, 6)


# ═══════════════════════════════════════════════════════════════════
# GROUPS
# ═══════════════════════════════════════════════════════════════════

class TestParseIngredients:

    def test_anonymous_group(self):
        """A list without a heading is an untitled group."""
        assert _groups("- a\n- b\n") == [
            IngredientGroup(ingredients=[Ingredient(name="a"), Ingredient(name="b")]),
        ]

    def test_named_groups(self):
        """Each heading names the list after it."""
        groups = _groups("## Dry\n\n- flour\n\n## Wet\n\n- milk\n")
        assert [group.title for group in groups] == ["Dry", "Wet"]
        assert groups[1].ingredients == [Ingredient(name="milk")]

    def test_heading_level_is_ignored(self):
        """Groups stay flat whatever the heading level."""
        groups = _groups("# Dough\n\n- flour\n\n### Filling\n\n- jam\n")
        assert [group.title for group in groups] == ["Dough", "Filling"]

    def test_anonymous_then_named(self):
        """An untitled group may precede named ones."""
        groups = _groups("- water\n\n## Sauce\n\n- tomatoes\n")
        assert [group.title for group in groups] == [None, "Sauce"]

    def test_empty_heading_title(self):
        """A heading without text names its group with an empty title."""
        groups = _groups("##\n\n- salt\n")
        assert groups[0].title == ""

    def test_ordered_list(self):
        """Ordered lists are ingredient lists too."""
        [group] = _groups("1. salt\n2. pepper\n")
        assert [ingredient.name for ingredient in group.ingredients] == ["salt", "pepper"]

    def test_stops_at_divider(self):
        """The second divider ends the section and is consumed."""
        builder = NodeBuilder("- salt\n\n---\n\nMix.\n")
        parse_ingredients(builder)
        assert builder.pos == 12


class TestParseIngredientsErrors:

    def test_heading_followed_by_heading(self):
        """A heading directly followed by another points at the first."""
        error = _error("## Dry\n\n## Wet\n\n- milk\n")
        assert error.kind == "empty_ingredient_group"
        assert error.span == Span(0, 7)

    def test_heading_at_end(self):
        """A heading with nothing after it is an empty group."""
        error = _error("- salt\n\n## Garnish\n")
        assert error.kind == "empty_ingredient_group"
        assert error.span == Span(8, 19)

    def test_heading_before_divider(self):
        """A heading right before the divider is an empty group."""
        error = _error("## Garnish\n\n---\n")
        assert error.kind == "empty_ingredient_group"
        assert error.span == Span(0, 11)

    def test_no_groups(self):
        """A section without any list has no location."""
        error = _error("---\n")
        assert error.kind == "empty_ingredient_group"
        assert error.span is None

    def test_paragraph_in_section(self):
        """Anything but headings and lists must be the divider."""
        error = _error("- salt\n\nMix well.\n")
        assert error.kind == "expected_horizontal_line"
        assert error.span == Span(8, 18)
