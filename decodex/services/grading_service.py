from difflib import SequenceMatcher
import re
import unicodedata


def _fold_accents(s):
    if not s:
        return ""
    nfkd = unicodedata.normalize("NFKD", s)
    return "".join(ch for ch in nfkd if not unicodedata.combining(ch))


def normalize_answer(s):
    """
    Canonical form used to compare a submitted answer with the stored one.

    Casefolded, accents folded to their base letter and runs of whitespace
    collapsed. Punctuation is kept: "C" and "C++" are different answers,
    while "  Élémentary,  Watson! " and "elementary, watson!" are the same.
    """
    if not s:
        return ""
    s = _fold_accents(s)
    s = s.casefold()
    return re.sub(r"\s+", " ", s).strip()


def _sim(a, b):
    a, b = normalize_answer(a), normalize_answer(b)
    if not a or not b:
        return 0.0
    if a == b:
        return 1.0
    return SequenceMatcher(None, a, b).ratio()


def answers_match(submitted, stored, threshold=1.0):
    """
    True when ``submitted`` is accepted for ``stored``.

    With the default threshold of 1.0 the normalized strings must be equal.
    A lower threshold accepts near misses by SequenceMatcher ratio.
    """
    if threshold >= 1.0:
        a = normalize_answer(submitted)
        return bool(a) and a == normalize_answer(stored)
    return _sim(submitted, stored) >= threshold


def completion_bonus_for_rank(rank, schedule, floor=0):
    """
    Bonus for the ``rank``-th team (1-based) to finish the sequence.

    ``schedule`` lists the bonus per rank, first finisher first. Ranks past
    the end of the schedule get ``floor``.
    """
    if rank is None or rank < 1:
        return 0
    if rank <= len(schedule):
        return max(0, int(schedule[rank - 1]))
    return max(0, int(floor))


def apply_multiplier(points, boosted):
    return max(0, int(points or 0)) * (2 if boosted else 1)
