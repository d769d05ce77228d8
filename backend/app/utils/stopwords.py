"""Stopword sets used when normalizing document text."""
from typing import Dict, FrozenSet, Iterable

ENGLISH_STOPWORDS = frozenset(
    """
    a about above after again against all almost also although always am
    among an and another any anybody anyone anything are aren around as at
    be became because become been before being below between both but by
    came can cannot could couldn did didn do does doesn doing don done down
    during each either else enough etc even ever every few for from further
    get gets got had hadn has hasn have haven having he her here hers herself
    him himself his how however i ie if in indeed into is isn it its itself
    just least less let like made make many may me might mine more most
    mostly much must mustn my myself neither never no nobody none nor not
    nothing now of off often on once one only onto or other others otherwise
    ought our ours ourselves out over own per perhaps quite rather really
    said same see seem seemed seems several shall she should shouldn since
    so some somebody someone something sometimes still such than that the
    their theirs them themselves then there therefore these they this those
    though through thus to together too toward towards under until up upon
    us very via was wasn way we well were weren what whatever when whenever
    where whereas wherever whether which while who whoever whom whose why
    will with within without won would wouldn yet you your yours yourself
    yourselves
    """.split()
)

# Registered stopword sets keyed by language code
STOPWORDS: Dict[str, FrozenSet[str]] = {
    "en": ENGLISH_STOPWORDS,
}

LANGUAGE_ALIASES = {
    "english": "en",
    "eng": "en",
}


def resolve_language(language: str) -> str:
    """Return the registered language code for ``language`` or raise ``ValueError``."""
    code = (language or "").strip().lower()
    code = LANGUAGE_ALIASES.get(code, code)
    if code not in STOPWORDS:
        raise ValueError(
            f"Unsupported stopword language: {language!r}. "
            f"Supported: {', '.join(sorted(STOPWORDS))}"
        )
    return code


def get_stopwords(language: str = "en", extra: Iterable[str] = ()) -> FrozenSet[str]:
    """
    Get the stopword set for a language, optionally extended.

    Args:
        language: Language code or alias (e.g. "en", "english")
        extra: Additional stopwords, lowercased before use

    Returns:
        Frozen set of stopwords
    """
    base = STOPWORDS[resolve_language(language)]
    extra_words = {word.strip().lower() for word in extra if word and word.strip()}
    if not extra_words:
        return base
    return base | extra_words
