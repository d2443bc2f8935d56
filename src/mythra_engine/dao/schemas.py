"""Pydantic schemas for DAO endpoints."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class QuestionCreate(BaseModel):
    question_text: str = Field(..., min_length=1, max_length=200)
    options: list[str] = Field(..., min_length=2)


class QuestionUpdate(BaseModel):
    question_text: Optional[str] = Field(default=None, min_length=1, max_length=200)
    options: Optional[list[str]] = Field(default=None, min_length=2)


class OptionResponse(BaseModel):
    id: str
    option_text: str
    order: int

    model_config = {"from_attributes": True}


class QuestionResponse(BaseModel):
    id: str
    event_id: str
    question_text: str
    order: int
    created_by: str
    options: list[OptionResponse]
    created_at: datetime

    model_config = {"from_attributes": True}


class VoteCreate(BaseModel):
    question_id: str
    option_id: str


class InvestorProgressResponse(BaseModel):
    investor_id: str
    voted_questions: int
    total_questions: int
    missing_question_ids: list[str]


class VotingStatusResponse(BaseModel):
    all_voted: bool
    investor_count: int
    question_count: int
    total_votes: int
    expected_votes: int
    pending_investors: list[str]
    investors: list[InvestorProgressResponse]


class VoteResponse(BaseModel):
    id: str
    question_id: str
    option_id: str
    investor_id: str
    voting: VotingStatusResponse
    event_advanced: bool


class OptionResult(BaseModel):
    option_id: str
    option_text: str
    votes: int
    percentage: float


class QuestionResult(BaseModel):
    question_id: str
    question_text: str
    total_votes: int
    leading_option_id: Optional[str] = None
    options: list[OptionResult]


class ResultsResponse(BaseModel):
    event_id: str
    questions: list[QuestionResult]


class QuestionVoteCount(BaseModel):
    question_id: str
    question_text: str
    votes: int


class DAOStatsResponse(BaseModel):
    event_id: str
    event_name: str
    status: str
    total_questions: int
    total_investors: int
    investors_voted: int
    total_votes: int
    expected_votes: int
    completion_percentage: float
    all_voted: bool
    questions: list[QuestionVoteCount]
