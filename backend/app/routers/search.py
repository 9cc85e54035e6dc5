"""Semantic search and question answering routes."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.db.dependencies import get_db
from app.schemas.common import ApiResponse
from app.schemas.search import AnswerResult, AskRequest, SearchRequest, SemanticSearchData
from app.services.answers import answer_question
from app.services.llm import LLMError
from app.services.search import RetrievalUnavailableError, search_links

router = APIRouter()


@router.post("/search", response_model=ApiResponse[SemanticSearchData])
def search(
    payload: SearchRequest,
    db: Session = Depends(get_db),
) -> ApiResponse[SemanticSearchData]:
    """Run semantic search over enriched links."""

    try:
        results = search_links(db, query=payload.query, limit=payload.limit, threshold=payload.threshold)
    except RetrievalUnavailableError as exc:
        raise HTTPException(status_code=503, detail=f"Search unavailable: {exc}") from exc
    return ApiResponse(
        data=SemanticSearchData(
            query=payload.query,
            limit=payload.limit,
            threshold=payload.threshold,
            results=results,
        )
    )


@router.post("/ask", response_model=ApiResponse[AnswerResult])
def ask(
    payload: AskRequest,
    db: Session = Depends(get_db),
) -> ApiResponse[AnswerResult]:
    """Answer a question from saved links."""

    try:
        result = answer_question(db, payload.question)
    except (RetrievalUnavailableError, LLMError) as exc:
        raise HTTPException(status_code=503, detail=f"Ask unavailable: {exc}") from exc
    return ApiResponse(data=result)
