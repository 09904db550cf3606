"""Sport and division registry.

The SPORTS table is the single source of truth for:
- Valid sport slugs (as used in ncaa.com URLs)
- Supported divisions per sport and their GraphQL division codes
- Whether a sport's scoreboard is week-based or date-based

This module also provides normalization logic to map alternate sport names
(like "mens-basketball", "MBB") to canonical slugs.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class SportConfig:
    """Static configuration for one sport."""

    slug: str
    code: str  # GraphQL sportCode
    divisions: dict[str, int] = field(default_factory=dict)
    week_based: bool = False
    graphql: bool = True
    # Divisions with an NCAA championship bracket page
    bracket_divisions: frozenset[str] = frozenset()


_D123 = {"d1": 1, "d2": 2, "d3": 3}

SPORTS: dict[str, SportConfig] = {
    "football": SportConfig(
        slug="football",
        code="MFB",
        divisions={"fbs": 11, "fcs": 12, "d2": 2, "d3": 3},
        week_based=True,
        bracket_divisions=frozenset({"fcs", "d2", "d3"}),
    ),
    "basketball-men": SportConfig(
        slug="basketball-men",
        code="MBB",
        divisions=_D123,
        bracket_divisions=frozenset(_D123),
    ),
    "basketball-women": SportConfig(
        slug="basketball-women",
        code="WBB",
        divisions=_D123,
        bracket_divisions=frozenset(_D123),
    ),
    "baseball": SportConfig(
        slug="baseball", code="MBA", divisions=_D123, bracket_divisions=frozenset(_D123)
    ),
    "softball": SportConfig(
        slug="softball", code="WSB", divisions=_D123, bracket_divisions=frozenset(_D123)
    ),
    "icehockey-men": SportConfig(
        slug="icehockey-men",
        code="MIH",
        divisions={"d1": 1, "d3": 3},
        bracket_divisions=frozenset({"d1", "d3"}),
    ),
    "icehockey-women": SportConfig(
        slug="icehockey-women",
        code="WIH",
        divisions={"d1": 1, "d3": 3},
        bracket_divisions=frozenset({"d1", "d3"}),
    ),
    "soccer-men": SportConfig(
        slug="soccer-men", code="MSO", divisions=_D123, bracket_divisions=frozenset(_D123)
    ),
    "soccer-women": SportConfig(
        slug="soccer-women", code="WSO", divisions=_D123, bracket_divisions=frozenset(_D123)
    ),
    "volleyball-women": SportConfig(
        slug="volleyball-women", code="WVB", divisions=_D123, bracket_divisions=frozenset(_D123)
    ),
    "lacrosse-men": SportConfig(
        slug="lacrosse-men", code="MLA", divisions=_D123, bracket_divisions=frozenset(_D123)
    ),
    "lacrosse-women": SportConfig(
        slug="lacrosse-women", code="WLA", divisions=_D123, bracket_divisions=frozenset(_D123)
    ),
    "fieldhockey": SportConfig(
        slug="fieldhockey", code="WFH", divisions=_D123, bracket_divisions=frozenset(_D123)
    ),
    # Beach volleyball is only published through the legacy feeds
    "beach-volleyball": SportConfig(
        slug="beach-volleyball", code="BVB", divisions={"nc": 1}, graphql=False
    ),
}

# Map alternate sport names to canonical slugs
SPORT_ALIASES: dict[str, str] = {
    "mens-basketball": "basketball-men",
    "womens-basketball": "basketball-women",
    "mbb": "basketball-men",
    "wbb": "basketball-women",
    "college-football": "football",
    "mfb": "football",
    "mens-hockey": "icehockey-men",
    "womens-hockey": "icehockey-women",
    "mens-soccer": "soccer-men",
    "womens-soccer": "soccer-women",
    "womens-volleyball": "volleyball-women",
    "mens-lacrosse": "lacrosse-men",
    "womens-lacrosse": "lacrosse-women",
    "field-hockey": "fieldhockey",
}


def normalize_sport(sport: str) -> str:
    """Normalize a sport name to its canonical slug.

    Unknown sports are returned lowercased and stripped.

    Examples:
        >>> normalize_sport("MBB")
        'basketball-men'
        >>> normalize_sport("football")
        'football'
    """
    if not sport:
        return "unknown"
    lower = sport.lower().strip()
    return SPORT_ALIASES.get(lower, lower)


def get_sport(sport: str) -> SportConfig | None:
    """Look up a sport config by any accepted name."""
    return SPORTS.get(normalize_sport(sport))
