"""
Recipe models - the typed result of parsing a RecipeMD document.

All models are frozen: a parsed recipe is handed to the caller once and is
never mutated afterwards.
"""

from fractions import Fraction
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from ..constants import U16_MAX, U32_MAX


class IntegerFactor(BaseModel):
    """A whole number amount, e.g. the ``2`` in ``2 eggs``."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["integer"] = "integer"
    value: int = Field(ge=0, le=U32_MAX, description="The whole number")

    def __float__(self) -> float:
        return float(self.value)


class FractionFactor(BaseModel):
    """An exact rational amount, e.g. ``1 1/2`` stored as 3/2."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["fraction"] = "fraction"
    numerator: int = Field(ge=0, le=U16_MAX, description="Numerator, with any whole part folded in")
    denominator: int = Field(ge=1, le=U16_MAX, description="Denominator, never zero")

    @property
    def value(self) -> Fraction:
        return Fraction(self.numerator, self.denominator)

    def __float__(self) -> float:
        return self.numerator / self.denominator


class FloatFactor(BaseModel):
    """A decimal amount, e.g. ``1.5`` or ``1,5``."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["float"] = "float"
    value: float = Field(description="The decimal value")

    def __float__(self) -> float:
        return self.value


Factor = Annotated[
    Union[IntegerFactor, FractionFactor, FloatFactor],
    Field(discriminator="kind"),
]


class Amount(BaseModel):
    """Amount of an ingredient or a yield: a numeric factor and an opaque unit"""
    model_config = ConfigDict(frozen=True)

    factor: Optional[Factor] = Field(
        default=None,
        description="Numeric part. None when the text had no recognizable number"
    )
    unit: Optional[str] = Field(
        default=None,
        description="Unit text kept verbatim (e.g. 'cups', 'glass', 'pinch')"
    )


class Ingredient(BaseModel):
    """Represents a single ingredient list entry"""
    model_config = ConfigDict(frozen=True)

    amount: Optional[Amount] = Field(default=None, description="Amount taken from the leading emphasis")
    name: str = Field(description="Name of the ingredient")
    link: Optional[str] = Field(
        default=None,
        description="Escaped link destination when the ingredient links to another recipe"
    )


class IngredientGroup(BaseModel):
    """A named or anonymous bucket of ingredients"""
    model_config = ConfigDict(frozen=True)

    title: Optional[str] = Field(
        default=None,
        description="Heading text of the group, None for ingredients listed without a heading"
    )
    ingredients: List[Ingredient] = Field(default=[], description="Ingredients in document order")


class Recipe(BaseModel):
    """Complete recipe parsed from a RecipeMD document"""
    model_config = ConfigDict(frozen=True)

    title: str = Field(description="Text of the first level heading")
    description: Optional[str] = Field(
        default=None,
        description="Markdown between the title and the first divider, tags and yields excluded"
    )
    tags: List[str] = Field(default=[], description="Tags in document order")
    yields: List[Amount] = Field(default=[], description="What the recipe makes")
    ingredients: List[IngredientGroup] = Field(
        min_length=1,
        description="Ingredient groups in document order"
    )
    instructions: Optional[str] = Field(
        default=None,
        description="Markdown after the second divider"
    )

    @classmethod
    def parse(cls, source: str) -> "Recipe":
        """Parse a recipe from a markdown string."""
        from ..parser import parse_recipe

        return parse_recipe(source)
