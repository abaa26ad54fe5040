"""Query preparation for hybrid (semantic + BM25) retrieval."""

from typing import Callable

from tentacle.domain.search import ProcessedQuery

# Expansions feed the semantic query only; the lexical query keeps the user's terms.
ABBREVIATIONS: dict[str, str] = {
    "ml": "machine learning",
    "ai": "artificial intelligence",
    "db": "database",
    "api": "application programming interface",
    "cli": "command line interface",
    "sdk": "software development kit",
    "os": "operating system",
    "ui": "user interface",
    "ux": "user experience",
    "ci": "continuous integration",
    "cd": "continuous deployment",
    "devops": "development operations",
    "auth": "authentication",
    "sso": "single sign on",
    "jwt": "json web token",
    "oauth": "open authorization",
    "http": "hypertext transfer protocol",
    "https": "hypertext transfer protocol secure",
    "url": "uniform resource locator",
    "sql": "structured query language",
    "nosql": "non relational database",
    "css": "cascading style sheets",
    "html": "hypertext markup language",
    "js": "javascript",
    "ts": "typescript",
    "py": "python",
    "k8s": "kubernetes",
    "aws": "amazon web services",
    "gcp": "google cloud platform",
}

LONG_TOKEN_CHARS = 5

WeightPolicy = Callable[[list[str]], float]


def adaptive_semantic_weight(tokens: list[str]) -> float:
    """Semantic weight by query length.

    One token leans fully lexical (a little semantic when it is at least five
    characters), two to four tokens lean lexical, five or more lean semantic.
    """
    if len(tokens) <= 1:
        if tokens and len(tokens[0]) >= LONG_TOKEN_CHARS:
            return 0.2
        return 0.0
    if len(tokens) <= 4:
        return 0.35
    return 0.55


def balanced_semantic_weight(tokens: list[str]) -> float:  # noqa: ARG001
    """Alternate policy: an even split whatever the query length."""
    return 0.5


def expand_abbreviations(tokens: list[str]) -> list[str]:
    return [ABBREVIATIONS.get(token.lower(), token) for token in tokens]


def preprocess_query(
    raw_query: str | None, weight_policy: WeightPolicy = adaptive_semantic_weight
) -> ProcessedQuery:
    """Prepare a raw search query.

    Args:
        raw_query: Text typed by the user
        weight_policy: Maps the query tokens to the semantic weight

    Returns:
        The trimmed query for lexical search, the abbreviation-expanded query for
        embedding, and weights summing to one.
    """
    fts_query = (raw_query or "").strip()
    tokens = fts_query.split()
    semantic_weight = weight_policy(tokens)
    return ProcessedQuery(
        normalized=" ".join(expand_abbreviations(tokens)),
        fts_query=fts_query,
        semantic_weight=semantic_weight,
        bm25_weight=1.0 - semantic_weight,
    )
