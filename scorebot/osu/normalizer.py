"""Normalization of raw osu! scores into render-ready results."""

from scorebot.shared.exceptions import UndefinedAccuracyError
from scorebot.shared.models import GameMode, HitCounts, NormalizedResult, RawResult

# Silver grades (hidden/flashlight) share the gold grade's palette entry
GRADE_ALIASES = {"XH": "X", "SH": "S"}


def calculate_accuracy(raw_accuracy: float | None, mode: GameMode, counts: HitCounts) -> float:
    """Return the reported accuracy, or derive it from hit counts.

    Upstream accuracy is used when present and nonzero. Otherwise it is
    recomputed with the ruleset's hit values. A play that genuinely scored
    0% recomputes to 0 from the same counts, so the fallback cannot change
    a real zero into something else.

    Mania weights every judgement::

        (50*meh + 100*ok + 200*good + 300*great + 300*perfect) / (300 * all six)

    The other rulesets only use great/ok/meh/miss::

        (300*great + 100*ok + 50*meh) / (300 * (great + ok + meh + miss))

    Args:
        raw_accuracy: Accuracy in [0, 1] from the API, or None
        mode: Ruleset the score was played in
        counts: Hit counts with absent buckets already zeroed

    Returns:
        Accuracy in [0, 1]

    Raises:
        UndefinedAccuracyError: If accuracy must be derived but there are no hits
    """
    if raw_accuracy:
        return raw_accuracy

    if mode.is_mania:
        total_hits = counts.perfect + counts.good + counts.meh + counts.great + counts.ok + counts.miss
        weighted = 50 * counts.meh + 100 * counts.ok + 200 * counts.good + 300 * counts.great + 300 * counts.perfect
    else:
        total_hits = counts.meh + counts.great + counts.ok + counts.miss
        weighted = 300 * counts.great + 100 * counts.ok + 50 * counts.meh

    if total_hits == 0:
        raise UndefinedAccuracyError(f"No hits recorded to derive {mode.value} accuracy from")

    return weighted / (300 * total_hits)


def display_score(total_score: int, legacy_total_score: int) -> int:
    """Pick the score to show; older plays only fill in the classic total."""
    return total_score if total_score != 0 else legacy_total_score


def normalize_grade(rank: str) -> str:
    """Fold silver grades onto their letter (XH -> X, SH -> S)."""
    return GRADE_ALIASES.get(rank, rank)


def normalize(raw: RawResult) -> NormalizedResult:
    """Convert a raw score into a NormalizedResult.

    Args:
        raw: Score as parsed from the API

    Returns:
        Result with zeroed hit counts, populated accuracy, and display score

    Raises:
        UndefinedAccuracyError: If accuracy is missing and cannot be derived
    """
    counts = HitCounts.from_statistics(raw.statistics)

    return NormalizedResult(
        id=raw.id,
        user_id=raw.user_id,
        user=raw.user,
        beatmap=raw.beatmap,
        beatmapset=raw.beatmapset,
        mode=raw.mode,
        total_score=raw.total_score,
        legacy_total_score=raw.legacy_total_score,
        pp=raw.pp,
        rank=normalize_grade(raw.rank),
        mods=list(raw.mods),
        max_combo=raw.max_combo,
        ended_at=raw.ended_at,
        statistics=counts,
        accuracy=calculate_accuracy(raw.accuracy, raw.mode, counts),
        display_score=display_score(raw.total_score, raw.legacy_total_score),
    )
