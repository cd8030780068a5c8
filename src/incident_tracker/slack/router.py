"""Slack fetch and channel registration endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Response

from incident_tracker.dependencies import get_fetcher, get_store, verify_api_secret
from incident_tracker.errors import ChannelNotFoundError, DuplicateChannelError
from incident_tracker.models.fetch import (
    Channel,
    ChannelInput,
    ChannelUpdate,
    FetchRequest,
    FetchResult,
)
from incident_tracker.slack.fetcher import SlackFetcher
from incident_tracker.storage.repository import SqlStore

router = APIRouter(prefix="", tags=["slack"])


@router.post(
    "/slack/fetch",
    response_model=FetchResult,
    response_model_exclude_none=True,
    dependencies=[Depends(verify_api_secret)],
)
async def fetch_messages(
    request: FetchRequest,
    fetcher: SlackFetcher = Depends(get_fetcher),
) -> FetchResult:
    """Fetch a channel's messages and threads for a date range.

    Run-level failures come back as ``{"status": "failed", "error": ...}``
    with a 200, matching what is recorded in fetch history.
    """
    return await fetcher.fetch_channel_messages(request)


@router.get("/channels", response_model=list[Channel])
async def list_channels(store: SqlStore = Depends(get_store)) -> list[Channel]:
    return await store.list_channels()


@router.post(
    "/channels",
    response_model=Channel,
    status_code=201,
    dependencies=[Depends(verify_api_secret)],
)
async def create_channel(
    data: ChannelInput,
    store: SqlStore = Depends(get_store),
) -> Channel:
    """Register a Slack channel so it can be fetched by id."""
    try:
        return await store.add_channel(data.slack_channel_id, data.name, data.enabled)
    except DuplicateChannelError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.patch(
    "/channels/{channel_id}",
    response_model=Channel,
    dependencies=[Depends(verify_api_secret)],
)
async def update_channel(
    channel_id: str,
    data: ChannelUpdate,
    store: SqlStore = Depends(get_store),
) -> Channel:
    try:
        return await store.update_channel(channel_id, data)
    except ChannelNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.delete(
    "/channels/{channel_id}",
    status_code=204,
    dependencies=[Depends(verify_api_secret)],
)
async def delete_channel(
    channel_id: str,
    store: SqlStore = Depends(get_store),
) -> Response:
    try:
        await store.delete_channel(channel_id)
    except ChannelNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return Response(status_code=204)
