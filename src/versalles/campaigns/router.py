"""Campaign API router."""

from fastapi import APIRouter, Depends, Request

from versalles.campaigns.schemas import CampaignCreate, CampaignResponse
from versalles.common.exceptions import NotFoundError
from versalles.common.schemas import StatusResponse, success
from versalles.common.security import require_user
from versalles.common.validation import read_payload, validate_form
from versalles.users.schemas import CurrentUser

router = APIRouter(prefix="/api/campaigns", tags=["campaigns"])


def _get_service():
    from versalles.deps import get_campaign_service
    return get_campaign_service()


def _get_db():
    from versalles.deps import get_db
    return get_db()


def _dump(campaign) -> dict:
    return CampaignResponse.model_validate(campaign).model_dump(mode="json")


@router.post("", response_model=StatusResponse, status_code=201)
async def create_campaign(request: Request, user: CurrentUser = Depends(require_user)):
    body = validate_form(CampaignCreate, await read_payload(request))
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        campaign = await svc.create_campaign(
            session, gm_id=user.id, **body.model_dump()
        )
        return success({"id": campaign.id})


@router.get("", response_model=StatusResponse)
async def list_my_campaigns(user: CurrentUser = Depends(require_user)):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        campaigns = await svc.list_for_gm(session, user.id)
        return success([_dump(c) for c in campaigns])


@router.get("/{campaign_id}", response_model=StatusResponse)
async def get_campaign(campaign_id: str, user: CurrentUser = Depends(require_user)):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        campaign = await svc.get_campaign(session, campaign_id)
        if campaign is None or (campaign.status == "Privada" and campaign.gm_id != user.id):
            raise NotFoundError("Campaign not found")
        return success(_dump(campaign))
