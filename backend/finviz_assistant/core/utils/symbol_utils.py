"""
Ticker symbol utilities.

Shared by the intent classifier's keyword fallback and the fallback data
generator, so both agree on what counts as a well-known symbol.
"""

import re

# Stock symbols pattern: 1-5 uppercase letters
SYMBOL_PATTERN = re.compile(r"\b[A-Z]{1,5}\b")

# Fixed pool used for synthetic fallback records
FALLBACK_SYMBOLS: tuple[str, ...] = (
    "AAPL",
    "GOOGL",
    "MSFT",
    "AMZN",
    "TSLA",
    "NVDA",
    "JPM",
    "V",
    "MA",
    "PG",
    "KO",
)

# Company names that map onto the fallback pool
COMPANY_SYMBOLS: dict[str, str] = {
    "apple": "AAPL",
    "google": "GOOGL",
    "alphabet": "GOOGL",
    "microsoft": "MSFT",
    "amazon": "AMZN",
    "tesla": "TSLA",
    "nvidia": "NVDA",
    "jpmorgan": "JPM",
    "visa": "V",
    "mastercard": "MA",
    "procter": "PG",
    "coca-cola": "KO",
    "coca cola": "KO",
}

# Uppercase words that look like symbols but aren't
STOP_WORDS = frozenset(
    {
        "I",
        "A",
        "THE",
        "AND",
        "OR",
        "FOR",
        "TO",
        "IN",
        "ON",
        "AT",
        "OF",
        "IS",
        "IT",
        "MY",
        "AN",
        "AS",
        "BE",
        "BY",
        "DO",
        "GO",
        "IF",
        "ME",
        "NO",
        "SO",
        "UP",
        "WE",
        "ALL",
        "CAN",
        "GET",
        "HOW",
        "NEW",
        "NOW",
        "YOU",
        "ETF",
        "IPO",
        "CEO",
        "CFO",
        "SEC",
        "USD",
        "EUR",
        "PE",
        "EPS",
    }
)

# Single letters in the pool ("V") only count when written as a standalone
# uppercase token next to other tickers; a lone "V" is too ambiguous.
_AMBIGUOUS_SHORT = frozenset({"V", "MA", "PG", "KO"})


def extract_symbols(text: str) -> list[str]:
    """
    Extract likely stock symbols from text.

    Args:
        text: Text to extract symbols from

    Returns:
        List of unique symbols found (deduplicated, ordered by first occurrence)

    Examples:
        >>> extract_symbols("show me a chart for AAPL")
        ['AAPL']
        >>> extract_symbols("Compare GOOGL and MSFT")
        ['GOOGL', 'MSFT']
    """
    candidates = SYMBOL_PATTERN.findall(text)

    # Deduplicate while preserving order
    seen = set()
    unique_symbols = []
    for symbol in candidates:
        if symbol in seen or symbol in STOP_WORDS:
            continue
        if len(symbol) >= 2 or symbol in FALLBACK_SYMBOLS:
            seen.add(symbol)
            unique_symbols.append(symbol)

    if len(unique_symbols) == 1 and unique_symbols[0] in _AMBIGUOUS_SHORT:
        return []
    return unique_symbols


def known_symbols_in(text: str | None) -> list[str]:
    """
    Fallback-pool symbols referenced by text, by ticker or company name.

    Examples:
        >>> known_symbols_in("AAPL")
        ['AAPL']
        >>> known_symbols_in("Microsoft stock")
        ['MSFT']
        >>> known_symbols_in("tech sector")
        []
    """
    if not text:
        return []

    found: list[str] = []
    for symbol in SYMBOL_PATTERN.findall(text.upper()):
        if symbol in FALLBACK_SYMBOLS and symbol not in found:
            # Case-insensitive tickers only for the unambiguous ones
            if symbol in _AMBIGUOUS_SHORT and symbol not in text:
                continue
            found.append(symbol)

    lowered = text.lower()
    for name, symbol in COMPANY_SYMBOLS.items():
        if name in lowered and symbol not in found:
            found.append(symbol)

    return found
