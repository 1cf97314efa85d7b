"""
Repair sheet routes.
"""
import asyncio
import logging
from typing import Any, List

from fastapi import APIRouter, Depends, HTTPException, Request, WebSocket, WebSocketDisconnect, status
from fastapi.responses import HTMLResponse, PlainTextResponse
from starlette.datastructures import UploadFile

from worxnotes.changefeed import ChangeEvent, ChangeType
from worxnotes.controllers.detail import COPYABLE_FIELDS, RepairDetailView, ViewMode
from worxnotes.controllers.form import AttachedFile, RepairFormController, empty_form
from worxnotes.controllers.listing import RepairListView, SortDirection
from worxnotes.dependencies import Services, get_services
from worxnotes.errors import ValidationError
from worxnotes.repository import SORTABLE_FIELDS
from worxnotes.schemas.repair_sheet import RepairSheet

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/repairs", tags=["repairs"])
ws_router = APIRouter(tags=["repairs"])

FILE_FIELD = "diagnostic_file"


async def _apply_form(request: Request, form: RepairFormController) -> None:
    """Route every submitted field through the controller's change handler."""
    data = await request.form()
    for name, value in data.multi_items():
        if isinstance(value, UploadFile):
            if name == FILE_FIELD and value.filename:
                form.select_file([
                    AttachedFile(
                        filename=value.filename,
                        content_type=value.content_type or "",
                        data=await value.read(),
                    )
                ])
            continue
        try:
            form.handle_change(name, value)
        except (KeyError, ValueError):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Unknown or invalid field: {name}"
            )


def _raise_for_failure(form: RepairFormController) -> None:
    error = form.last_error
    if isinstance(error, ValidationError):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))
    raise HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail=str(error) if error else "Repair sheet could not be saved"
    )


async def _load_detail(services: Services, repair_id: str, **kwargs: Any) -> RepairDetailView:
    view = RepairDetailView(services.repository, services.notifications, repair_id, **kwargs)
    await view.load()
    if view.mode is ViewMode.NOT_FOUND:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Repair not found"
        )
    if view.mode is ViewMode.ERROR:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(view.last_error)
        )
    return view


@router.get("/", response_model=List[RepairSheet])
async def get_repairs(
    sort: str = "created_at",
    direction: SortDirection = SortDirection.DESC,
    search: str = "",
    services: Services = Depends(get_services),
):
    """
    Get all repair sheets, sorted and filtered by a free-text search.
    """
    if sort not in SORTABLE_FIELDS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Cannot sort by {sort}"
        )
    view = RepairListView(services.repository, services.notifications)
    view.sort_field = sort
    view.sort_direction = direction
    view.search_term = search
    await view.load()
    return view.visible


@router.get("/new")
async def new_repair_form(request: Request, services: Services = Depends(get_services)):
    """
    Initial values for a new repair sheet, technician prefilled.
    """
    technician = services.preferences.get_technician_name(request.query_params)
    return {"form": empty_form(technician)}


@router.post("/", response_model=RepairSheet, status_code=status.HTTP_201_CREATED)
async def create_repair(request: Request, services: Services = Depends(get_services)):
    """
    Create a repair sheet from a submitted form.

    Measurements are addressed as ``group.field``; the diagnostic file goes in
    ``diagnostic_file``.
    """
    form = RepairFormController(services.repository, services.notifications, services.preferences)
    await _apply_form(request, form)
    sheet = await form.submit()
    if sheet is None:
        _raise_for_failure(form)
    return sheet


@router.get("/{repair_id}", response_model=RepairSheet)
async def get_repair(repair_id: str, services: Services = Depends(get_services)):
    """
    Get a specific repair sheet by ID.
    """
    view = await _load_detail(services, repair_id)
    return view.record


@router.put("/{repair_id}", response_model=RepairSheet)
async def update_repair(repair_id: str, request: Request, services: Services = Depends(get_services)):
    """
    Overwrite a repair sheet with the submitted form.
    """
    view = await _load_detail(services, repair_id)
    form = view.begin_edit()
    await _apply_form(request, form)
    sheet = await view.save()
    if sheet is None:
        _raise_for_failure(form)
    return sheet


@router.delete("/{repair_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_repair(
    repair_id: str,
    confirm: bool = False,
    services: Services = Depends(get_services),
):
    """
    Delete a repair sheet and its diagnostic file. Requires ``confirm=true``.
    """
    view = await _load_detail(services, repair_id, confirm=lambda message: confirm)
    if not confirm:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Deletion must be confirmed"
        )
    if not await view.delete():
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Repair sheet could not be deleted"
        )
    return None


@router.get("/{repair_id}/diagnostic", response_class=PlainTextResponse)
async def view_diagnostic_file(repair_id: str, services: Services = Depends(get_services)):
    """
    Text of the repair sheet's diagnostic file.
    """
    view = await _load_detail(services, repair_id)
    if not view.can_view_file:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No diagnostic file attached"
        )
    result = await view.view_diagnostic_file()
    if result is None:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to download file"
        )
    filename, text = result
    return PlainTextResponse(text, headers={"Content-Disposition": f'inline; filename="{filename}"'})


@router.get("/{repair_id}/print", response_class=HTMLResponse)
async def print_repair(repair_id: str, services: Services = Depends(get_services)):
    """
    Condensed printable layout, diagnostic file appended.
    """
    view = await _load_detail(services, repair_id)
    return HTMLResponse(view.render_print())


@router.post("/{repair_id}/copy/{field}")
async def copy_field(repair_id: str, field: str, services: Services = Depends(get_services)):
    """
    Copy one long-text field; the text is returned for the client's clipboard.
    """
    if field not in COPYABLE_FIELDS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Field {field} cannot be copied"
        )
    copied: list[str] = []
    view = await _load_detail(services, repair_id, clipboard=copied.append)
    view.copy_to_clipboard(field)
    return {"field": field, "text": copied[0] if copied else ""}


async def stop_task(task: asyncio.Task) -> None:
    """Cancel a background task and log anything it died with."""
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass
    except Exception:
        logger.exception("Failed to push repair list change")


@ws_router.websocket("/ws/repairs")
async def repairs_websocket(websocket: WebSocket):
    """
    Live repair list.

    On connect the client receives the current list, after that one message
    per insert, update or delete.
    """
    services: Services = websocket.app.state.services
    await websocket.accept()
    view = RepairListView(services.repository, services.notifications)
    queue: asyncio.Queue[ChangeEvent] = asyncio.Queue()

    # Subscribe before the snapshot query so nothing committed in between is lost.
    subscription = services.repository.subscribe(queue.put_nowait)
    records = await view.load()
    await websocket.send_json({
        "type": "snapshot",
        "repairs": [sheet.model_dump(mode="json") for sheet in records],
    })
    seen = {sheet.id for sheet in records}

    async def pump() -> None:
        while True:
            event = await queue.get()
            if event.event_type is ChangeType.INSERT:
                if event.record_id in seen:
                    continue
                seen.add(event.record_id)
            await websocket.send_json({"type": "change", **event.to_dict()})

    sender = asyncio.create_task(pump())
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.info("Repair list client disconnected")
    finally:
        subscription.unsubscribe()
        await stop_task(sender)
