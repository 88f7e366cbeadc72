import pytest

WATER = """# Water

A refreshing drink.

*drink, non-alcoholic, H2O*

**1 glass**

---

- *1* glass
- *1* faucet

---

Turn on the faucet and fill the glass.
"""


@pytest.fixture
def water() -> str:
    """The smallest complete recipe"""
    return WATER
