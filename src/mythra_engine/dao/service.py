"""DAO service: question authoring, voting, completion and results."""

import logging
from dataclasses import dataclass, field

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from mythra_engine.common.config import MythraSettings
from mythra_engine.common.exceptions import DAOError, QuestionNotFoundError
from mythra_engine.dao.models import DAOOptionModel, DAOQuestionModel, DAOVoteModel
from mythra_engine.events.models import EventModel
from mythra_engine.events.service import SYSTEM_ACTOR, EventService, can_manage
from mythra_engine.investments.models import InvestmentModel
from mythra_engine.lifecycle.machine import Actor
from mythra_engine.lifecycle.states import QUESTION_AUTHORING_STATES, EventStatus
from mythra_engine.lifecycle.voting import (
    QuestionRecord,
    QuestionTally,
    VoteRecord,
    VotingStatus,
    check_voting_complete,
    tally_results,
)

logger = logging.getLogger(__name__)

MAX_QUESTION_LEN = 200
MAX_OPTION_LEN = 100
MIN_OPTIONS = 2


@dataclass
class DAOStats:
    event_id: str
    event_name: str
    event_status: str
    voting: VotingStatus
    investors_voted: int
    completion_percentage: float
    question_votes: list[tuple[str, str, int]] = field(default_factory=list)


def _validate_question(question_text: str, options: list[str]) -> tuple[str, list[str]]:
    text = (question_text or "").strip()
    if not 1 <= len(text) <= MAX_QUESTION_LEN:
        raise DAOError(
            f"Question text must be 1-{MAX_QUESTION_LEN} characters", code="INVALID_QUESTION",
        )
    cleaned = [(o or "").strip() for o in options]
    if len(cleaned) < MIN_OPTIONS:
        raise DAOError(f"A question needs at least {MIN_OPTIONS} options", code="INVALID_QUESTION")
    for opt in cleaned:
        if not 1 <= len(opt) <= MAX_OPTION_LEN:
            raise DAOError(
                f"Option text must be 1-{MAX_OPTION_LEN} characters", code="INVALID_QUESTION",
            )
    return text, cleaned


class DAOService:
    """Question bank and vote tally for event DAOs."""

    def __init__(self, settings: MythraSettings, events: EventService):
        self.settings = settings
        self.events = events

    # ── Questions ──

    def _check_authoring(self, event: EventModel, actor: Actor) -> None:
        if not can_manage(event, actor):
            raise DAOError("Only the event organizer can manage DAO questions", code="FORBIDDEN")
        if EventStatus.parse(event.status) not in QUESTION_AUTHORING_STATES:
            raise DAOError(
                f"DAO questions cannot be changed while event is '{event.status}'",
                code="AUTHORING_CLOSED",
            )

    async def create_question(
        self,
        session: AsyncSession,
        event_id: str,
        actor: Actor,
        question_text: str,
        options: list[str],
    ) -> DAOQuestionModel:
        event = await self.events.require_event(session, event_id)
        self._check_authoring(event, actor)
        text, cleaned = _validate_question(question_text, options)

        max_order = (await session.execute(
            select(func.max(DAOQuestionModel.order)).where(DAOQuestionModel.event_id == event_id)
        )).scalar_one()
        question = DAOQuestionModel(
            event_id=event_id,
            question_text=text,
            order=0 if max_order is None else max_order + 1,
            created_by=actor.id,
            options=[DAOOptionModel(option_text=opt, order=i) for i, opt in enumerate(cleaned)],
        )
        session.add(question)
        await session.flush()
        logger.info("DAO question %s added to event %s", question.id, event_id)
        return question

    async def get_question(self, session: AsyncSession, question_id: str) -> DAOQuestionModel:
        question = await session.get(DAOQuestionModel, question_id)
        if question is None:
            raise QuestionNotFoundError()
        return question

    async def list_questions(
        self, session: AsyncSession, event_id: str,
    ) -> list[DAOQuestionModel]:
        result = await session.execute(
            select(DAOQuestionModel)
            .where(DAOQuestionModel.event_id == event_id)
            .order_by(DAOQuestionModel.order)
        )
        return list(result.scalars().all())

    async def _vote_count(self, session: AsyncSession, question_id: str) -> int:
        return (await session.execute(
            select(func.count(DAOVoteModel.id)).where(DAOVoteModel.question_id == question_id)
        )).scalar_one()

    async def _check_unlocked(self, session: AsyncSession, question: DAOQuestionModel) -> None:
        if await self._vote_count(session, question.id) > 0:
            raise DAOError("Question is locked because votes have been cast", code="QUESTION_LOCKED")

    async def update_question(
        self,
        session: AsyncSession,
        question_id: str,
        actor: Actor,
        question_text: str | None = None,
        options: list[str] | None = None,
    ) -> DAOQuestionModel:
        """Edit a question; refused once any vote references it."""
        question = await self.get_question(session, question_id)
        event = await self.events.require_event(session, question.event_id)
        self._check_authoring(event, actor)
        await self._check_unlocked(session, question)

        text, cleaned = _validate_question(
            question_text if question_text is not None else question.question_text,
            options if options is not None else [o.option_text for o in question.options],
        )
        question.question_text = text
        if options is not None:
            question.options = [
                DAOOptionModel(option_text=opt, order=i) for i, opt in enumerate(cleaned)
            ]
        await session.flush()
        return question

    async def delete_question(
        self, session: AsyncSession, question_id: str, actor: Actor,
    ) -> None:
        question = await self.get_question(session, question_id)
        event = await self.events.require_event(session, question.event_id)
        self._check_authoring(event, actor)
        await self._check_unlocked(session, question)
        await session.delete(question)
        await session.flush()
        logger.info("DAO question %s deleted from event %s", question_id, event.id)

    # ── Votes ──

    async def cast_vote(
        self,
        session: AsyncSession,
        event_id: str,
        question_id: str,
        option_id: str,
        investor_id: str,
    ) -> tuple[DAOVoteModel, VotingStatus, bool]:
        """Record one investor's vote.

        When this vote completes the DAO, the event is moved to ticket sales
        by the system actor. Returns (vote, voting status, advanced).
        """
        event = await self.events.require_event(session, event_id)
        if EventStatus.parse(event.status) != EventStatus.DAO_PROCESS:
            raise DAOError(
                f"Voting is not open while event is '{event.status}'", code="VOTING_CLOSED",
            )

        question = await self.get_question(session, question_id)
        if question.event_id != event_id:
            raise QuestionNotFoundError("DAO question does not belong to this event")
        if option_id not in {o.id for o in question.options}:
            raise DAOError("Option does not belong to this question", code="INVALID_OPTION")

        investment = (await session.execute(
            select(InvestmentModel.id).where(
                InvestmentModel.event_id == event_id,
                InvestmentModel.investor_id == investor_id,
                InvestmentModel.status == "confirmed",
            )
        )).scalar_one_or_none()
        if investment is None:
            raise DAOError("Only investors in this event may vote", code="NOT_AN_INVESTOR")

        existing = (await session.execute(
            select(DAOVoteModel.id).where(
                DAOVoteModel.investor_id == investor_id,
                DAOVoteModel.question_id == question_id,
            )
        )).scalar_one_or_none()
        if existing is not None:
            raise DAOError("Investor has already voted on this question", code="DUPLICATE_VOTE")

        vote = DAOVoteModel(
            event_id=event_id,
            question_id=question_id,
            option_id=option_id,
            investor_id=investor_id,
        )
        session.add(vote)
        try:
            await session.flush()
        except IntegrityError as exc:
            raise DAOError("Investor has already voted on this question", code="DUPLICATE_VOTE") from exc
        logger.info("Investor %s voted on question %s", investor_id, question_id)

        status = await self.voting_status(session, event_id)
        advanced = False
        if status.all_voted:
            await self.events.transition(
                session, event_id, EventStatus.SELLING_TICKETS, SYSTEM_ACTOR,
                note="all investors voted",
            )
            advanced = True
        return vote, status, advanced

    async def _vote_records(self, session: AsyncSession, event_id: str) -> list[VoteRecord]:
        rows = await session.execute(
            select(DAOVoteModel.investor_id, DAOVoteModel.question_id, DAOVoteModel.option_id)
            .where(DAOVoteModel.event_id == event_id)
        )
        return [VoteRecord(i, q, o) for i, q, o in rows.all()]

    async def voting_status(self, session: AsyncSession, event_id: str) -> VotingStatus:
        await self.events.require_event(session, event_id)
        questions = await self.list_questions(session, event_id)
        investors = await session.execute(
            select(InvestmentModel.investor_id).where(
                InvestmentModel.event_id == event_id,
                InvestmentModel.status == "confirmed",
            )
        )
        return check_voting_complete(
            [q.id for q in questions],
            investors.scalars().all(),
            await self._vote_records(session, event_id),
        )

    async def results(
        self, session: AsyncSession, event_id: str,
    ) -> tuple[list[DAOQuestionModel], list[QuestionTally]]:
        await self.events.require_event(session, event_id)
        questions = await self.list_questions(session, event_id)
        tallies = tally_results(
            [QuestionRecord(q.id, tuple(o.id for o in q.options)) for q in questions],
            await self._vote_records(session, event_id),
        )
        return questions, tallies

    async def dao_stats(self, session: AsyncSession, event_id: str) -> DAOStats:
        """Participation summary for an event's DAO vote."""
        event = await self.events.require_event(session, event_id)
        status = await self.voting_status(session, event_id)
        questions, tallies = await self.results(session, event_id)
        voted = sum(1 for p in status.per_investor.values() if p.voted_questions > 0)
        completion = (
            round(status.total_votes / status.expected_votes * 100, 1)
            if status.expected_votes else 0.0
        )
        return DAOStats(
            event_id=event.id,
            event_name=event.name,
            event_status=event.status,
            voting=status,
            investors_voted=voted,
            completion_percentage=completion,
            question_votes=[
                (q.id, q.question_text, t.total_votes) for q, t in zip(questions, tallies)
            ],
        )
