"""Metal value object enumerating the tracked commodities."""

from enum import Enum

_METAL_CODES: dict[str, str] = {
    "gold": "XAU",
    "silver": "XAG",
    "platinum": "XPT",
    "palladium": "XPD",
}


class Metal(Enum):
    """Precious metals whose spot price is resolved each cycle.

    Values are the lowercase names used in storage and on the wire;
    ``code`` gives the ISO 4217 style symbol used by upstream providers.
    """

    GOLD = "gold"
    SILVER = "silver"
    PLATINUM = "platinum"
    PALLADIUM = "palladium"

    @property
    def code(self) -> str:
        """Provider symbol for the metal (e.g. XAU for gold)."""
        return _METAL_CODES[self.value]

    @property
    def display_name(self) -> str:
        """Human-readable name used in notification text."""
        return self.value.capitalize()

    @classmethod
    def from_code(cls, code: str) -> "Metal":
        """Look up a metal by its provider symbol.

        Raises:
            ValueError: If the code does not name a tracked metal.
        """
        for metal in cls:
            if metal.code == code.upper():
                return metal
        raise ValueError(f"Unknown metal code: {code}")


ALL_METALS: tuple[Metal, ...] = tuple(Metal)
