"""JSON API over studio sessions for web front ends."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, HTTPException, Request, Response, status
from pydantic import BaseModel

from creative_director.api.views import render_step, session_summary
from creative_director.domain.errors import SessionBusy, StudioError
from creative_director.domain.images import ImageRef

if TYPE_CHECKING:
    from creative_director.containers import AppContainer
    from creative_director.services.studio import StudioSession

router = APIRouter(prefix="/studio", tags=["studio"])


class ActionRequest(BaseModel):
    """Optional arguments for a studio action."""

    value: str | None = None
    text: str | None = None
    image: str | None = None


def _container(request: Request) -> AppContainer:
    return request.app.state.container


def _get_session(request: Request, session_id: str) -> StudioSession:
    studio = _container(request).session_store.get(session_id)
    if studio is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return studio


def _payload(session_id: str, studio: StudioSession) -> dict[str, object]:
    view = render_step(studio.state)
    return {
        **session_summary(session_id, studio.state),
        "title": view.title,
        "text": view.body,
        "options": [
            {"label": option.label, "action": option.action, "value": option.value}
            for option in view.options
        ],
    }


@router.post("/sessions", status_code=status.HTTP_201_CREATED)
async def create_session(request: Request) -> dict[str, object]:
    """Start a new session on the upload step."""
    session_id, studio = _container(request).session_store.create()
    return _payload(session_id, studio)


@router.get("/sessions/{session_id}")
async def get_session(session_id: str, request: Request) -> dict[str, object]:
    """Return the current step and collected data."""
    return _payload(session_id, _get_session(request, session_id))


@router.post("/sessions/{session_id}/actions/{action}")
async def perform_action(
    session_id: str,
    action: str,
    request: Request,
    body: ActionRequest | None = None,
) -> dict[str, object]:
    """Run one transition; long-running actions return once they finish."""
    studio = _get_session(request, session_id)
    arguments = body or ActionRequest()
    try:
        image = ImageRef.from_data_url(arguments.image) if arguments.image else None
        await studio.perform(
            action, arguments.value, image=image, text=arguments.text
        )
    except StudioError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail=str(exc)
        ) from exc
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return _payload(session_id, studio)


@router.get("/sessions/{session_id}/image")
async def download_image(session_id: str, request: Request) -> Response:
    """Download the latest generated image."""
    image = _get_session(request, session_id).current_session().generated_image
    if image is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return Response(
        content=image.data,
        media_type=image.mime_type,
        headers={"Content-Disposition": 'attachment; filename="creative-asset.png"'},
    )


@router.delete("/sessions/{session_id}")
async def delete_session(session_id: str, request: Request) -> dict[str, str]:
    """Forget a session that has no request in flight."""
    if _get_session(request, session_id).is_loading():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail=str(SessionBusy())
        )
    _container(request).session_store.drop(session_id)
    return {"status": "ok"}
