from app.core.constants import RANKS, RANK_LABELS


def rank_index(rank) -> int:
    """Position of a rank on the F..S ladder (F = 0)."""
    return RANKS.index(_letter(rank))


def ranks_through(rank) -> tuple[str, ...]:
    """Every rank from F up to and including `rank`."""
    return RANKS[: rank_index(rank) + 1]


def rank_label(rank) -> str:
    return RANK_LABELS[_letter(rank)]


def _letter(rank) -> str:
    # Accept both the Rank enum and plain letters
    letter = getattr(rank, "value", rank)
    if letter not in RANKS:
        raise ValueError(f"Unknown rank: {rank!r}")
    return letter
