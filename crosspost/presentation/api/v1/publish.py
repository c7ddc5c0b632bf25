from fastapi import APIRouter, Depends

from ....application.dtos import PublishOutcomeDTO, PublishRequestDTO
from ....application.services import PublishDispatcher
from ...middleware import Caller, require_caller
from ..dependencies import get_publish_dispatcher

router = APIRouter(tags=["publish"])


@router.post(
    "/publish",
    response_model=PublishOutcomeDTO,
    summary="Publish to connected accounts",
    description=(
        "Publish one post to several connected accounts. Responds 200 with "
        "per-account results even when every target failed."
    ),
)
async def publish(
    request: PublishRequestDTO,
    caller: Caller = Depends(require_caller),
    dispatcher: PublishDispatcher = Depends(get_publish_dispatcher),
) -> PublishOutcomeDTO:
    outcome = await dispatcher.publish(
        user_id=caller.user_id,
        workspace_id=request.workspace_id,
        content=request.content,
        target_account_ids=request.target_account_ids,
        link_url=request.link_url,
        media_url=request.media_url,
        media_type=request.media_type,
    )
    return PublishOutcomeDTO.from_outcome(outcome)
