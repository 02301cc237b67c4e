"""
Ticker extraction from free-form chat text.

Heuristic by nature: every 1-5 letter word of the upper-cased message is a
candidate, so the stopword list carries most of the precision. Real tickers
that collide with ordinary words ("IT", "GO", "ALL") are excluded on purpose.
"""

import re

MAX_SYMBOLS = 5

_SYMBOL_PATTERN = re.compile(r"\$?\b[A-Z]{1,5}\b")

STOPWORDS = frozenset(
    {
        # articles, pronouns, prepositions, conjunctions
        "A", "I", "AN", "THE", "AND", "OR", "NOR", "BUT", "SO", "YET", "IF",
        "OF", "TO", "IN", "ON", "AT", "BY", "FOR", "FROM", "WITH", "INTO",
        "ONTO", "UPON", "ABOUT", "ABOVE", "BELOW", "UNDER", "OVER", "AFTER",
        "SINCE", "UNTIL", "UP", "DOWN", "OUT", "OFF", "VIA", "PER", "VS",
        "ME", "MY", "WE", "US", "OUR", "OURS", "YOU", "YOUR", "HE", "HIM",
        "HIS", "SHE", "HER", "HERS", "IT", "ITS", "THEY", "THEM", "THEIR",
        "THIS", "THAT", "THESE", "THOSE", "WHO", "WHOM", "WHOSE", "WHAT",
        "WHICH", "WHEN", "WHERE", "WHY", "HOW",
        # verbs and auxiliaries
        "AM", "IS", "ARE", "WAS", "WERE", "BE", "BEEN", "BEING", "DO", "DOES",
        "DID", "DONE", "HAS", "HAVE", "HAD", "CAN", "COULD", "MAY", "MIGHT",
        "MUST", "SHALL", "WILL", "WOULD", "SHOULD", "GET", "GETS", "GOT",
        "GO", "GOES", "GOING", "SAY", "SAID", "SEE", "SEEN", "SHOW", "TELL",
        "GIVE", "MAKE", "TAKE", "KNOW", "THINK", "LOOK", "WANT", "NEED",
        "LIKE", "USE", "PUT", "LET", "HELP", "FIND", "CHECK", "KEEP", "COME",
        "DOING", "WORTH",
        # adverbs, adjectives, quantifiers
        "NOT", "NO", "YES", "ALL", "ANY", "SOME", "EACH", "EVERY", "BOTH",
        "MORE", "MOST", "LESS", "LEAST", "MUCH", "MANY", "FEW", "VERY", "TOO",
        "ALSO", "JUST", "ONLY", "EVEN", "STILL", "AGAIN", "EVER", "NEVER",
        "NOW", "THEN", "THAN", "HERE", "THERE", "TODAY", "WEEK", "MONTH",
        "YEAR", "DAY", "DAYS", "TIME", "LONG", "SHORT", "HIGH", "LOW",
        "GOOD", "BEST", "BAD", "WORST", "BIG", "NEW", "OLD", "NEXT", "LAST",
        "FIRST", "OTHER", "SAME", "WELL", "BACK", "WAY", "ONE", "TWO",
        "THREE", "OK", "OKAY", "THANK", "HI", "HELLO",
        "HEY", "BOY", "MAN", "NEAR", "OWN", "REAL", "RIGHT",
        # contraction fragments (WHAT'S -> WHAT, S)
        "S", "T", "D", "M", "LL", "RE", "VE",
        # domain vocabulary
        "STOCK", "SHARE", "PRICE", "QUOTE", "TRADE", "API", "BUY", "SELL",
        "HOLD", "CALL", "PUTS", "CALLS", "RISK", "LOSS", "GAIN", "GAINS",
        "CHART", "VALUE", "RATE", "RATES", "YIELD", "CASH", "FUND", "FUNDS",
        "INDEX", "BOND", "BONDS", "ETF", "ETFS", "IPO", "CEO", "CFO", "EPS",
        "PE", "USD", "EUR", "NEWS", "DATA", "INFO", "TREND", "BULL", "BEAR",
        "OPEN", "CLOSE", "DIV", "AI",
    }
)


def extract_symbols(message: str) -> list[str]:
    """Return up to MAX_SYMBOLS candidate tickers in order of first appearance."""
    if not message:
        return []
    symbols: list[str] = []
    for token in _SYMBOL_PATTERN.findall(message.upper()):
        symbol = token.lstrip("$")
        if symbol in STOPWORDS or symbol in symbols:
            continue
        symbols.append(symbol)
        if len(symbols) == MAX_SYMBOLS:
            break
    return symbols
