"""Parse RecipeMD documents into Recipe models."""

import logging
from typing import List, Optional

from .exceptions import RecipeParseError
from .models.recipe import IngredientGroup, Recipe
from .services.amount import OverflowPolicy
from .services.ingredients import parse_ingredients
from .services.nodes import NodeBuilder
from .services.sections import (
    DescriptionTagsYields,
    parse_description_tags_yields,
    parse_title,
)
from .utils.text import trim_newlines

logger = logging.getLogger(__name__)


class RecipeParser:
    """
    Single-use parser for one markdown document.

    Sections are parsed in document order, each one pulling nodes from the
    shared ``NodeBuilder`` until its closing horizontal line.
    """

    def __init__(self, source: str, overflow: Optional[OverflowPolicy] = None):
        self.source = source
        self.overflow = overflow
        self.nodes = NodeBuilder(source)

    def parse_title(self) -> str:
        return parse_title(self.nodes)

    def parse_description_tags_yields(self) -> DescriptionTagsYields:
        return parse_description_tags_yields(self.nodes, self.overflow)

    def parse_ingredients(self) -> List[IngredientGroup]:
        return parse_ingredients(self.nodes, self.overflow)

    def parse_instructions(self) -> Optional[str]:
        """Everything after the last consumed node, if anything is left."""
        if self.nodes.pos >= len(self.source):
            return None
        return trim_newlines(self.source[self.nodes.pos:]) or None

    def parse(self) -> Recipe:
        """
        Parse the whole document.

        Raises:
            RecipeParseError: on the first problem found, with the source attached.
        """
        logger.debug(f"Parsing recipe ({len(self.source)} chars)")
        try:
            title = self.parse_title()
            header = self.parse_description_tags_yields()
            ingredients = self.parse_ingredients()
            instructions = self.parse_instructions()
        except RecipeParseError as e:
            logger.debug(f"Recipe rejected: {e.kind} at {e.span}")
            raise e.with_source(self.source)

        recipe = Recipe(
            title=title,
            description=header.description,
            tags=header.tags,
            yields=header.yields,
            ingredients=ingredients,
            instructions=instructions,
        )
        logger.info(
            f"Parsed recipe {title!r}: "
            f"{sum(len(group.ingredients) for group in ingredients)} ingredients "
            f"in {len(ingredients)} groups"
        )
        return recipe


def parse_recipe(source: str, overflow: Optional[OverflowPolicy] = None) -> Recipe:
    """Parse a recipe from a markdown string."""
    return RecipeParser(source, overflow).parse()
