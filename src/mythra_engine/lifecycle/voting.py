"""DAO vote completion and result tallies.

Pure functions over caller-supplied question, investor and vote lists. This
is the only place that decides whether an event's DAO vote is complete.
"""

from dataclasses import dataclass, field
from typing import Iterable


@dataclass(frozen=True)
class VoteRecord:
    investor_id: str
    question_id: str
    option_id: str | None = None


@dataclass(frozen=True)
class QuestionRecord:
    id: str
    option_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class InvestorProgress:
    voted_questions: int
    total_questions: int
    missing_question_ids: tuple[str, ...] = ()

    @property
    def complete(self) -> bool:
        return not self.missing_question_ids


@dataclass(frozen=True)
class VotingStatus:
    all_voted: bool
    investor_count: int
    question_count: int
    total_votes: int
    expected_votes: int
    per_investor: dict[str, InvestorProgress] = field(default_factory=dict)

    @property
    def pending_investors(self) -> list[str]:
        return [i for i, p in self.per_investor.items() if not p.complete]


def check_voting_complete(
    question_ids: Iterable[str],
    investor_ids: Iterable[str],
    votes: Iterable[VoteRecord],
) -> VotingStatus:
    """
    Decide whether every investor has voted on every question.

    Duplicate investor or question ids count once, as do repeated votes on
    the same question. Votes from non-investors or on unknown questions are
    ignored. With no investors the result is never complete; with investors
    but no questions it is trivially complete.
    """
    questions = list(dict.fromkeys(question_ids))
    investors = list(dict.fromkeys(investor_ids))
    question_set = set(questions)
    investor_set = set(investors)

    cast: set[tuple[str, str]] = {
        (v.investor_id, v.question_id)
        for v in votes
        if v.investor_id in investor_set and v.question_id in question_set
    }

    per_investor: dict[str, InvestorProgress] = {}
    for investor in investors:
        missing = tuple(q for q in questions if (investor, q) not in cast)
        per_investor[investor] = InvestorProgress(
            voted_questions=len(questions) - len(missing),
            total_questions=len(questions),
            missing_question_ids=missing,
        )

    all_voted = bool(investors) and all(p.complete for p in per_investor.values())
    return VotingStatus(
        all_voted=all_voted,
        investor_count=len(investors),
        question_count=len(questions),
        total_votes=len(cast),
        expected_votes=len(investors) * len(questions),
        per_investor=per_investor,
    )


@dataclass(frozen=True)
class OptionTally:
    option_id: str
    votes: int
    percentage: float


@dataclass(frozen=True)
class QuestionTally:
    question_id: str
    total_votes: int
    options: tuple[OptionTally, ...]

    @property
    def leading_option_id(self) -> str | None:
        """Option with the most votes; ``None`` on no votes or a tie."""
        if self.total_votes == 0:
            return None
        top = max(o.votes for o in self.options)
        leaders = [o.option_id for o in self.options if o.votes == top]
        return leaders[0] if len(leaders) == 1 else None


def tally_results(
    questions: Iterable[QuestionRecord],
    votes: Iterable[VoteRecord],
) -> list[QuestionTally]:
    """Per-question option counts, one vote per investor per question."""
    questions = list(questions)
    counted: dict[tuple[str, str], str] = {}
    for v in votes:
        if v.option_id is None:
            continue
        counted.setdefault((v.investor_id, v.question_id), v.option_id)

    tallies = []
    for q in questions:
        counts = {opt: 0 for opt in q.option_ids}
        for (_investor, question_id), option_id in counted.items():
            if question_id == q.id and option_id in counts:
                counts[option_id] += 1
        total = sum(counts.values())
        tallies.append(QuestionTally(
            question_id=q.id,
            total_votes=total,
            options=tuple(
                OptionTally(
                    option_id=opt,
                    votes=n,
                    percentage=round(n / total * 100, 2) if total else 0.0,
                )
                for opt, n in counts.items()
            ),
        ))
    return tallies
