"""Best-effort account type inference from free-text names."""

from typing import Optional

# Checked in order; the first type with a matching keyword wins.
SIMPLEFIN_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("checking", ("checking", "chequing")),
    ("savings", ("savings", "save")),
    ("credit", ("credit", "card")),
    ("investment", ("investment", "brokerage", "401k", "ira")),
)

BUDGET_EXPORT_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("checking", ("checking",)),
    ("savings", ("savings",)),
    ("credit", ("credit",)),
    ("investment", ("invest",)),
)

# Whole YNAB account type identifiers, matched alongside the keywords.
YNAB_EXACT_TYPES = {
    "checking": "checking",
    "savings": "savings",
    "creditcard": "credit",
    "investmentaccount": "investment",
}


def infer_account_type(
    name: str,
    source_type: Optional[str] = None,
    keywords: tuple[tuple[str, tuple[str, ...]], ...] = BUDGET_EXPORT_KEYWORDS,
    exact_types: Optional[dict[str, str]] = None,
) -> str:
    """Infer checking/savings/credit/investment/other from a name and source type.

    Matching is case-insensitive substring matching against both the source
    type string and the display name, in the fixed order of ``keywords``.
    ``exact_types`` maps whole lower-cased source type values to a type and is
    consulted at the same priority as the keyword of that type.
    """
    name_lower = (name or "").lower()
    type_lower = (source_type or "").lower()
    exact = (exact_types or {}).get(type_lower)

    for account_type, words in keywords:
        if exact == account_type:
            return account_type
        for word in words:
            if word in type_lower or word in name_lower:
                return account_type
    return "other"


def infer_simplefin_account_type(name: str) -> str:
    """Infer the account type of a SimpleFIN account from its name alone."""
    return infer_account_type(name, keywords=SIMPLEFIN_KEYWORDS)
