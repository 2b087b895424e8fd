"""
Pass/fail status and merit position for exam results.

A subject with an MCQ part passes when written >= 24 and mcq >= 10; a
written-only subject passes at written >= 33. One failed subject fails the
whole result, whatever the total. Passing students are ranked by total marks
inside their cohort: every result of the same class, exam type and year.

Everything here is pure. Callers fetch the cohort and hand it in; ranks are
only as fresh as that fetch.
"""

import logging
from bisect import bisect_right
from collections import Counter
from typing import Any, Dict, List, Mapping, Sequence, Tuple, Union

from pydantic import ValidationError

from exceptions import MalformedMarkError, DuplicateRollError, RollNotInCohortError
from schemas.results import SubjectMark

logger = logging.getLogger(__name__)

WRITTEN_PASS_MARK = 33
WRITTEN_PASS_MARK_WITH_MCQ = 24
MCQ_PASS_MARK = 10

FAIL = "Fail"

COMPETITION = "competition"
ORDINAL = "ordinal"
RANKING_POLICIES = (COMPETITION, ORDINAL)

MeritPosition = Union[int, str]


def _field(record: Any, name: str) -> Any:
    if isinstance(record, Mapping):
        return record[name]
    return getattr(record, name)


def _as_number(value: float) -> Union[int, float]:
    return int(value) if float(value).is_integer() else round(value, 2)


def to_subject_mark(subject: str, mark: Any) -> SubjectMark:
    """Validate a stored/raw mark. Missing or negative scores are rejected, never zero-filled."""
    if isinstance(mark, SubjectMark):
        return mark
    if not isinstance(mark, Mapping):
        raise MalformedMarkError(subject, "expected an object with 'written' and optional 'mcq'")
    try:
        return SubjectMark.model_validate(mark)
    except ValidationError as e:
        reason = e.errors()[0].get("msg", "invalid mark")
        raise MalformedMarkError(subject, reason) from e


def evaluate_subject(mark: Any, subject: str = "") -> Tuple[float, bool]:
    """Return (sub_total, passed) for one subject."""
    mark = to_subject_mark(subject, mark)

    if mark.has_mcq:
        passed = mark.written >= WRITTEN_PASS_MARK_WITH_MCQ and mark.mcq >= MCQ_PASS_MARK
        return mark.written + mark.mcq, passed

    return mark.written, mark.written >= WRITTEN_PASS_MARK


def evaluate_student(record: Any) -> Tuple[float, bool]:
    """
    Return (total_marks, failed) for a result.

    ``record`` is a ResultRecord (or anything with ``marks``) or the marks
    mapping itself. Failed subjects still count towards the total.
    """
    marks = record if isinstance(record, Mapping) and "marks" not in record else _field(record, "marks")

    total = 0.0
    failed = False
    for subject, mark in marks.items():
        sub_total, passed = evaluate_subject(mark, subject)
        total += sub_total
        if not passed:
            failed = True
    return total, failed


def rank_cohort(target: Any, cohort: Sequence[Any], policy: str = COMPETITION) -> MeritPosition:
    """
    Merit position of ``target`` inside ``cohort``, or "Fail".

    competition: 1 + number of passing students with a strictly higher total,
        so totals [90, 75, 75] rank [1, 2, 2]. The target roll must appear
        exactly once in the cohort.
    ordinal: 1-based index in the passing list sorted by total (stable, so
        ties keep cohort order): [90, 75, 75] rank [1, 2, 3]. A roll that
        cannot be found comes back as "Fail".
    """
    if policy not in RANKING_POLICIES:
        raise ValueError(f"Unknown ranking policy: {policy}")

    target_total, target_failed = evaluate_student(target)
    if target_failed:
        return FAIL

    target_roll = str(_field(target, "roll"))
    passing: List[Tuple[str, float]] = []
    for record in cohort:
        total, failed = evaluate_student(record)
        if not failed:
            passing.append((str(_field(record, "roll")), total))

    if policy == ORDINAL:
        ranked = sorted(passing, key=lambda item: item[1], reverse=True)
        for position, (roll, _) in enumerate(ranked, start=1):
            if roll == target_roll:
                return position
        logger.warning("Roll %s passed but is missing from the passing cohort", target_roll)
        return FAIL

    occurrences = sum(1 for record in cohort if str(_field(record, "roll")) == target_roll)
    if occurrences > 1:
        raise DuplicateRollError(target_roll, occurrences)
    if occurrences == 0 or target_roll not in {roll for roll, _ in passing}:
        raise RollNotInCohortError(target_roll)

    return 1 + sum(1 for _, total in passing if total > target_total)


def merit_outcome(target: Any, cohort: Sequence[Any], policy: str = COMPETITION) -> Dict[str, Any]:
    total, _ = evaluate_student(target)
    return {
        "totalMarks": _as_number(total),
        "meritPosition": rank_cohort(target, cohort, policy),
    }


def merit_list(cohort: Sequence[Any], policy: str = COMPETITION) -> List[Tuple[Any, Dict[str, Any]]]:
    """
    Every record of the cohort with its outcome; ranked students first, then
    fails in cohort order. Same positions as calling merit_outcome per record,
    but each record is evaluated once.
    """
    if policy not in RANKING_POLICIES:
        raise ValueError(f"Unknown ranking policy: {policy}")

    evaluated = [(record, str(_field(record, "roll"))) + evaluate_student(record) for record in cohort]
    passing = [(roll, total) for _, roll, total, failed in evaluated if not failed]

    if policy == ORDINAL:
        ordinal_positions: Dict[str, int] = {}
        ranked_totals = sorted(passing, key=lambda item: item[1], reverse=True)
        for position, (roll, _) in enumerate(ranked_totals, start=1):
            ordinal_positions.setdefault(roll, position)
    else:
        roll_counts = Counter(roll for _, roll, _, _ in evaluated)
        ascending = sorted(total for _, total in passing)

    ranked = []
    failed_entries = []
    for record, roll, total, failed in evaluated:
        if failed:
            failed_entries.append((record, {"totalMarks": _as_number(total), "meritPosition": FAIL}))
            continue
        if policy == ORDINAL:
            position = ordinal_positions[roll]
        else:
            if roll_counts[roll] > 1:
                raise DuplicateRollError(roll, roll_counts[roll])
            position = 1 + len(ascending) - bisect_right(ascending, total)
        ranked.append((record, {"totalMarks": _as_number(total), "meritPosition": position}))

    ranked.sort(key=lambda e: e[1]["meritPosition"])
    return ranked + failed_entries
