"""
Ingredient tree builder - the part between the two horizontal lines.

The section is a sequence of lists, optionally introduced by headings:

    - *1* glass                  <- anonymous group
    ## Sauce
    - *200 g* [tomatoes](./tomatoes.md)
    - salt

Every heading opens a named group that the next list fills. Each list item is
matched against a handful of shapes by ``classify_ingredient``.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Literal, Optional

from ..exceptions import RecipeParseError
from ..models.recipe import Amount, Ingredient, IngredientGroup
from ..utils.text import escape_href
from .amount import OverflowPolicy, parse_amount
from .nodes import Node, NodeBuilder, flatten_paragraphs
from .spans import Span, span_of

logger = logging.getLogger(__name__)

IngredientShape = Literal[
    "empty",        # nothing, or only an amount
    "wrapped",      # a single paragraph around the real content
    "amount_link",  # *amount* [name](link)
    "amount_name",  # *amount* name
    "link",         # [name](link)
    "name",         # anything else, taken verbatim
]

# Characters that don't make a name on their own
EMPHASIS_DELIMITERS = "*_"


@dataclass
class ClassifiedIngredient:
    """The shape of an ingredient item and the nodes each part was taken from."""
    shape: IngredientShape
    amount: Optional[Node] = None
    link: Optional[Node] = None
    rest: List[Node] = field(default_factory=list)


def classify_ingredient(children: List[Node]) -> ClassifiedIngredient:
    """Match the children of an ingredient item against the known shapes, in order."""
    if not children or (len(children) == 1 and children[0].kind == "emphasis"):
        return ClassifiedIngredient("empty")

    first = children[0]
    if len(children) == 1 and first.kind == "paragraph":
        return ClassifiedIngredient("wrapped", rest=[first])

    if first.kind == "emphasis":
        if len(children) == 2 and children[1].kind == "link":
            return ClassifiedIngredient("amount_link", amount=first, link=children[1])
        if (
            len(children) == 3
            and children[1].kind == "text"
            and children[1].text == " "
            and children[2].kind == "link"
        ):
            return ClassifiedIngredient("amount_link", amount=first, link=children[2])
        return ClassifiedIngredient("amount_name", amount=first, rest=children[1:])

    if len(children) == 1 and first.kind == "link":
        return ClassifiedIngredient("link", link=first)

    return ClassifiedIngredient("name", rest=children)


def _name(source: str, nodes: List[Node], span: Span) -> str:
    if not nodes:
        raise RecipeParseError("empty_ingredient", span)
    name = span_of(nodes).slice(source).strip()
    if not name.strip(EMPHASIS_DELIMITERS + " \t\r\n"):
        raise RecipeParseError("empty_ingredient", span)
    return name


def _amount(source: str, emphasis: Node, overflow: Optional[OverflowPolicy]) -> Optional[Amount]:
    if not emphasis.children:
        return None
    return parse_amount(source, span_of(emphasis.children), overflow)


def parse_ingredient(
    source: str,
    node: Node,
    overflow: Optional[OverflowPolicy] = None,
) -> Ingredient:
    """
    Build an ingredient from a list item or paragraph node.

    Raises:
        RecipeParseError: ``empty_ingredient`` when no name can be extracted.
    """
    if node.kind not in ("list_item", "paragraph"):
        raise ValueError(f"ingredient must be a list item or paragraph, got {node.kind}")

    classified = classify_ingredient(node.children)

    if classified.shape == "empty":
        raise RecipeParseError("empty_ingredient", node.span)

    if classified.shape == "wrapped":
        return parse_ingredient(source, classified.rest[0], overflow)

    if classified.shape == "amount_link":
        link = classified.link
        name = _name(source, link.children, link.span)
        return Ingredient(
            amount=_amount(source, classified.amount, overflow),
            name=name,
            link=escape_href(link.destination or ""),
        )

    if classified.shape == "amount_name":
        return Ingredient(
            amount=_amount(source, classified.amount, overflow),
            name=_name(source, classified.rest, node.span),
        )

    if classified.shape == "link":
        link = classified.link
        return Ingredient(
            name=_name(source, link.children, link.span),
            link=escape_href(link.destination or ""),
        )

    return Ingredient(name=_name(source, classified.rest, node.span))


def _list_ingredients(source: str, node: Node, overflow: Optional[OverflowPolicy]) -> List[Ingredient]:
    return [
        parse_ingredient(source, flatten_paragraphs(item), overflow)
        for item in node.children
    ]


def parse_ingredients(
    builder: NodeBuilder,
    overflow: Optional[OverflowPolicy] = None,
) -> List[IngredientGroup]:
    """
    Consume the ingredient section up to the second horizontal line or the end.

    Raises:
        RecipeParseError: ``empty_ingredient_group`` when a heading gets no
            list or the section holds no group at all,
            ``expected_horizontal_line`` for anything but headings and lists.
    """
    source = builder.source
    groups: List[IngredientGroup] = []
    # the heading whose list is still to come
    pending: Optional[Node] = None

    for node in builder.nodes():
        if node.kind == "heading":
            if pending is not None:
                raise RecipeParseError("empty_ingredient_group", pending.span)
            pending = node
        elif node.kind == "list":
            title = None
            if pending is not None:
                title = span_of(pending.children).slice(source) if pending.children else ""
            groups.append(IngredientGroup(
                title=title,
                ingredients=_list_ingredients(source, node, overflow),
            ))
            logger.debug(f"Parsed ingredient group {title!r} with {len(node.children)} ingredients")
            pending = None
        elif node.kind == "horizontal_line":
            break
        else:
            raise RecipeParseError("expected_horizontal_line", node.span)

    if pending is not None:
        raise RecipeParseError("empty_ingredient_group", pending.span)
    if not groups:
        raise RecipeParseError("empty_ingredient_group", None)

    return groups
