"""Shared constants for trade enums, breakdown labels and chart buckets."""

ASSET_TYPES = ["STOCK", "FOREX", "CRYPTO", "OPTIONS"]
DIRECTIONS = ["LONG", "SHORT"]
TIMES_OF_DAY = ["PRE_MARKET", "MARKET_OPEN", "MID_DAY", "MARKET_CLOSE", "AFTER_HOURS"]
MARKET_CONDITIONS = ["TRENDING", "RANGING", "VOLATILE", "CALM"]

DEFAULT_CURRENCY = "USD"

# Label for trades whose breakdown field is missing
UNKNOWN_LABEL = "Unknown"

# Sunday-first, matching the journal's calendar views
DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]

# P&L distribution buckets, ordered from worst to best
PNL_BUCKETS = [
    "Loss > $500",
    "Loss $100-$500",
    "Loss $0-$100",
    "Breakeven",
    "Win $0-$100",
    "Win $100-$500",
    "Win > $500",
]

CURRENCY_SYMBOLS: dict[str, str] = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "CNY": "¥",
    "INR": "₹",
    "KRW": "₩",
    "CHF": "CHF ",
    "CAD": "CA$",
    "AUD": "A$",
    "BTC": "₿",
}
