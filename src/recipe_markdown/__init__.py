"""Recipe markdown package for parsing RecipeMD documents into structured data."""

from .exceptions import ERROR_MESSAGES, ErrorKind, MalformedEventStreamError, RecipeParseError
from .models.recipe import (
    Amount,
    Factor,
    FloatFactor,
    FractionFactor,
    Ingredient,
    IngredientGroup,
    IntegerFactor,
    Recipe,
)
from .parser import RecipeParser, parse_recipe
from .services.amount import parse_amount

__all__ = [
    "parse_recipe",
    "parse_amount",
    "RecipeParser",
    "Recipe",
    "IngredientGroup",
    "Ingredient",
    "Amount",
    "Factor",
    "IntegerFactor",
    "FractionFactor",
    "FloatFactor",
    "RecipeParseError",
    "MalformedEventStreamError",
    "ErrorKind",
    "ERROR_MESSAGES",
]
