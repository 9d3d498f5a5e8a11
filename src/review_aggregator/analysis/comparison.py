# review_aggregator/analysis/comparison.py

"""Score comparison between two critics reviewing the same album."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from review_aggregator.domain.models import AgreementLevel, Comparison

# Agreement classification: diff < AGREE_BELOW is "agree", diff > DISAGREE_ABOVE
# is "disagree", anything in between is "similar".
AGREE_BELOW = 1.0
DISAGREE_ABOVE = 3.0

# Preference is reported independently of the agreement level.
PREFERENCE_TOLERANCE = 0.5

SIMILAR = "similar"


def compare(
    score_a: float | None,
    score_b: float | None,
    *,
    source_a: str = "a",
    source_b: str = "b",
) -> Comparison | None:
    """Compare two scores on the 0-10 scale.

    Returns None if either score is missing.
    """
    if score_a is None or score_b is None:
        return None

    diff = round_half_up(abs(score_a - score_b))
    average = round_half_up((score_a + score_b) / 2)

    # Thresholds apply to the reported, rounded difference.
    agreement = classify(diff)

    if diff <= PREFERENCE_TOLERANCE:
        preferred = SIMILAR
    else:
        preferred = source_a if score_a > score_b else source_b

    return Comparison(
        score_difference=diff,
        average_score=average,
        agreement_level=agreement,
        preferred_source=preferred,
        explanation=explain(
            score_a,
            score_b,
            agreement,
            source_a=source_a,
            source_b=source_b,
        ),
    )


def round_half_up(value: float, places: int = 1) -> float:
    """Round like a person would: 7.25 -> 7.3, not banker's 7.2."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def classify(diff: float) -> AgreementLevel:
    """Map an absolute score difference to an agreement level."""
    if diff < AGREE_BELOW:
        return AgreementLevel.AGREE
    if diff > DISAGREE_ABOVE:
        return AgreementLevel.DISAGREE
    return AgreementLevel.SIMILAR


def explain(
    score_a: float,
    score_b: float,
    agreement: AgreementLevel,
    *,
    source_a: str = "a",
    source_b: str = "b",
) -> str:
    """Render a one-sentence explanation for a comparison."""
    a, b = _fmt(score_a), _fmt(score_b)

    if agreement is AgreementLevel.AGREE:
        return (
            f"Both critics give similar ratings ({a} vs {b}), "
            "suggesting strong consensus."
        )

    if agreement is AgreementLevel.DISAGREE:
        if score_a > score_b:
            higher, lower = source_a, source_b
        else:
            higher, lower = source_b, source_a
        return (
            f"Strong disagreement: {_display(higher)} rates it "
            f"{_fmt(max(score_a, score_b))}/10 while {_display(lower)} gives it "
            f"{_fmt(min(score_a, score_b))}/10."
        )

    return (
        f"Mild difference in ratings ({a} vs {b}) "
        "suggests nuanced perspectives on the album."
    )


def _fmt(score: float) -> str:
    # 9.0 -> "9", 8.5 -> "8.5"
    return f"{score:g}"


def _display(reviewer: str) -> str:
    return reviewer.replace("_", " ").title()
