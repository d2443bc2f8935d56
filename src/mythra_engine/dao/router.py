"""DAO API router: questions, votes, completion status and results."""

from fastapi import APIRouter, Depends, HTTPException

from mythra_engine.common.exceptions import MythraError
from mythra_engine.common.http import http_error
from mythra_engine.common.security import get_actor
from mythra_engine.dao.schemas import (
    DAOStatsResponse,
    InvestorProgressResponse,
    OptionResult,
    QuestionCreate,
    QuestionResponse,
    QuestionResult,
    QuestionUpdate,
    QuestionVoteCount,
    ResultsResponse,
    VoteCreate,
    VoteResponse,
    VotingStatusResponse,
)
from mythra_engine.lifecycle.machine import Actor
from mythra_engine.lifecycle.states import Role
from mythra_engine.lifecycle.voting import VotingStatus

router = APIRouter()


def _get_service():
    from mythra_engine.deps import get_dao_service
    return get_dao_service()


def _get_db():
    from mythra_engine.deps import get_db
    return get_db()


def _status_response(status: VotingStatus) -> VotingStatusResponse:
    return VotingStatusResponse(
        all_voted=status.all_voted,
        investor_count=status.investor_count,
        question_count=status.question_count,
        total_votes=status.total_votes,
        expected_votes=status.expected_votes,
        pending_investors=status.pending_investors,
        investors=[
            InvestorProgressResponse(
                investor_id=investor_id,
                voted_questions=p.voted_questions,
                total_questions=p.total_questions,
                missing_question_ids=list(p.missing_question_ids),
            )
            for investor_id, p in status.per_investor.items()
        ],
    )


# ── Questions ──

@router.post("/events/{event_id}/questions", response_model=QuestionResponse, status_code=201)
async def create_question(event_id: str, body: QuestionCreate, actor: Actor = Depends(get_actor)):
    svc = _get_service()
    db = _get_db()
    try:
        async with db.get_session() as session:
            question = await svc.create_question(
                session, event_id, actor, body.question_text, body.options,
            )
            return QuestionResponse.model_validate(question)
    except MythraError as e:
        raise http_error(e)


@router.get("/events/{event_id}/questions", response_model=list[QuestionResponse])
async def list_questions(event_id: str):
    svc = _get_service()
    db = _get_db()
    try:
        async with db.get_session() as session:
            await svc.events.require_event(session, event_id)
            questions = await svc.list_questions(session, event_id)
            return [QuestionResponse.model_validate(q) for q in questions]
    except MythraError as e:
        raise http_error(e)


@router.patch("/questions/{question_id}", response_model=QuestionResponse)
async def update_question(
    question_id: str, body: QuestionUpdate, actor: Actor = Depends(get_actor),
):
    svc = _get_service()
    db = _get_db()
    try:
        async with db.get_session() as session:
            question = await svc.update_question(
                session, question_id, actor,
                question_text=body.question_text,
                options=body.options,
            )
            return QuestionResponse.model_validate(question)
    except MythraError as e:
        raise http_error(e)


@router.delete("/questions/{question_id}", status_code=204)
async def delete_question(question_id: str, actor: Actor = Depends(get_actor)):
    svc = _get_service()
    db = _get_db()
    try:
        async with db.get_session() as session:
            await svc.delete_question(session, question_id, actor)
    except MythraError as e:
        raise http_error(e)


# ── Votes ──

@router.post("/events/{event_id}/votes", response_model=VoteResponse, status_code=201)
async def cast_vote(event_id: str, body: VoteCreate, actor: Actor = Depends(get_actor)):
    if actor.role != Role.INVESTOR:
        raise HTTPException(status_code=403, detail="Only investors can vote")
    svc = _get_service()
    db = _get_db()
    try:
        async with db.get_session() as session:
            vote, status, advanced = await svc.cast_vote(
                session, event_id, body.question_id, body.option_id, actor.id,
            )
            return VoteResponse(
                id=vote.id,
                question_id=vote.question_id,
                option_id=vote.option_id,
                investor_id=vote.investor_id,
                voting=_status_response(status),
                event_advanced=advanced,
            )
    except MythraError as e:
        raise http_error(e)


@router.get("/events/{event_id}/voting-status", response_model=VotingStatusResponse)
async def voting_status(event_id: str):
    svc = _get_service()
    db = _get_db()
    try:
        async with db.get_session() as session:
            status = await svc.voting_status(session, event_id)
            return _status_response(status)
    except MythraError as e:
        raise http_error(e)


@router.get("/events/{event_id}/results", response_model=ResultsResponse)
async def results(event_id: str):
    svc = _get_service()
    db = _get_db()
    try:
        async with db.get_session() as session:
            questions, tallies = await svc.results(session, event_id)
            by_id = {q.id: q for q in questions}
            out = []
            for tally in tallies:
                question = by_id[tally.question_id]
                labels = {o.id: o.option_text for o in question.options}
                out.append(QuestionResult(
                    question_id=tally.question_id,
                    question_text=question.question_text,
                    total_votes=tally.total_votes,
                    leading_option_id=tally.leading_option_id,
                    options=[
                        OptionResult(
                            option_id=o.option_id,
                            option_text=labels.get(o.option_id, ""),
                            votes=o.votes,
                            percentage=o.percentage,
                        )
                        for o in tally.options
                    ],
                ))
            return ResultsResponse(event_id=event_id, questions=out)
    except MythraError as e:
        raise http_error(e)


@router.get("/events/{event_id}/dao-stats", response_model=DAOStatsResponse)
async def dao_stats(event_id: str):
    svc = _get_service()
    db = _get_db()
    try:
        async with db.get_session() as session:
            stats = await svc.dao_stats(session, event_id)
            return DAOStatsResponse(
                event_id=stats.event_id,
                event_name=stats.event_name,
                status=stats.event_status,
                total_questions=stats.voting.question_count,
                total_investors=stats.voting.investor_count,
                investors_voted=stats.investors_voted,
                total_votes=stats.voting.total_votes,
                expected_votes=stats.voting.expected_votes,
                completion_percentage=stats.completion_percentage,
                all_voted=stats.voting.all_voted,
                questions=[
                    QuestionVoteCount(question_id=qid, question_text=text, votes=votes)
                    for qid, text, votes in stats.question_votes
                ],
            )
    except MythraError as e:
        raise http_error(e)
