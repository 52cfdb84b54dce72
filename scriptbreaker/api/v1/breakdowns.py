import uuid

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from scriptbreaker.api.deps import EpisodeStoreDep
from scriptbreaker.api.v1.schemas import (
    BreakdownCommitRequest,
    BreakdownCreate,
    BreakdownRead,
    CommitRejectedRead,
    CommitResultRead,
    PendingBreakdownRead,
)
from scriptbreaker.core.request_context import get_request_id
from scriptbreaker.services import pending, script_breakdown
from scriptbreaker.services.hierarchy_merge import MergeError


router = APIRouter(tags=["breakdowns"])

_REJECTION_STATUS = {
    MergeError.EPISODE_NOT_FOUND: 404,
    MergeError.EMPTY_BREAKDOWN: 400,
}
_REJECTION_DETAIL = {
    MergeError.EPISODE_NOT_FOUND: "target episode not found",
    MergeError.EMPTY_BREAKDOWN: "breakdown has no panels",
}


@router.post("/breakdowns", response_model=PendingBreakdownRead)
def create_breakdown(payload: BreakdownCreate, store=EpisodeStoreDep):
    entry = script_breakdown.analyze(store, payload.text, payload.episode_count)
    return entry


@router.get("/breakdowns/{breakdown_id}", response_model=PendingBreakdownRead)
def get_breakdown(breakdown_id: uuid.UUID):
    return pending.get(breakdown_id)


@router.delete("/breakdowns/{breakdown_id}", response_model=dict)
def discard_breakdown(breakdown_id: uuid.UUID):
    pending.discard(breakdown_id)
    return {"status": "discarded"}


@router.post(
    "/breakdowns/{breakdown_id}/commit",
    response_model=CommitResultRead,
    responses={400: {"model": CommitRejectedRead}, 404: {"model": CommitRejectedRead}},
)
def commit_breakdown(breakdown_id: uuid.UUID, payload: BreakdownCommitRequest, store=EpisodeStoreDep):
    result, entry = script_breakdown.commit(store, breakdown_id, payload.target_episode)
    if not result.ok:
        # The breakdown stays pending and is sent back unmodified for retargeting.
        body = CommitRejectedRead(
            detail=_REJECTION_DETAIL[result.error],
            error=result.error.value,
            request_id=get_request_id(),
            breakdown_id=breakdown_id,
            breakdown=BreakdownRead.model_validate(entry.breakdown),
        )
        return JSONResponse(status_code=_REJECTION_STATUS[result.error], content=body.model_dump(mode="json"))

    return CommitResultRead(
        strategy=result.strategy.value,
        selected_episode_id=result.selected_episode_id,
        created_episode_ids=result.created_episode_ids,
        created_panel_ids=result.created_panel_ids,
    )
