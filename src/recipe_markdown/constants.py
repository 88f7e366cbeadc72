"""Constants for recipe markdown package."""

import os
from typing import Literal

from dotenv import load_dotenv

load_dotenv()

# Largest values a fraction part and an integer amount may take
U16_MAX = 0xFFFF
U32_MAX = 0xFFFFFFFF

# What to do with amounts that don't fit: "error" rejects the recipe, "saturate" clamps
AMOUNT_OVERFLOW: Literal["error", "saturate"] = os.getenv("RECIPE_MARKDOWN_AMOUNT_OVERFLOW", "error")

# Validate that the policy is supported
if AMOUNT_OVERFLOW not in ["error", "saturate"]:
    raise ValueError(f"Unsupported amount overflow policy: {AMOUNT_OVERFLOW}. Must be one of: error, saturate")
