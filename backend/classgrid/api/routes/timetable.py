from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from sqlalchemy.orm import Session

from classgrid.api.deps import get_db
from classgrid.schemas.timetable import (
    GenerateTimetableRequest,
    GenerateTimetableResponse,
    TermTimetableOut,
    TimetableEntryOut,
)
from classgrid.services.progress_hub import progress_hub
from classgrid.services.timetable_service import TimetableGenerator
from classgrid.services.timetable_view import build_term_timetable, list_class_entries

router = APIRouter()


@router.post("/timetable/generate", response_model=GenerateTimetableResponse)
def generate_timetable(
    payload: GenerateTimetableRequest,
    db: Session = Depends(get_db),
) -> GenerateTimetableResponse:
    return TimetableGenerator(db).invoke(payload)


@router.get("/timetable/terms/{term_id}", response_model=TermTimetableOut)
def get_term_timetable(term_id: str, db: Session = Depends(get_db)) -> TermTimetableOut:
    return build_term_timetable(db, term_id)


@router.get("/timetable/classes/{class_id}/entries", response_model=list[TimetableEntryOut])
def get_class_entries(class_id: str, db: Session = Depends(get_db)) -> list[TimetableEntryOut]:
    return list_class_entries(db, class_id)


@router.websocket("/timetable/progress/{run_id}/ws")
async def progress_websocket(websocket: WebSocket, run_id: str) -> None:
    await progress_hub.connect(run_id, websocket)
    try:
        await websocket.send_json({"event": "connected", "run_id": run_id})
        while True:
            message = await websocket.receive_text()
            if message.strip().lower() == "ping":
                await websocket.send_json({"event": "pong"})
    except WebSocketDisconnect:
        pass
    finally:
        await progress_hub.disconnect(run_id, websocket)
