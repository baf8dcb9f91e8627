from fastapi import FastAPI, HTTPException
from typing import List, Optional
from pydantic import BaseModel
import os
import logging
from dotenv import load_dotenv

# Load env first so the settings store sees API keys
load_dotenv(".env", override=False)

from .converter import PinyinConverter
from .editor import Position, TextBuffer
from .llm import get_llm_client
from .notices import RecordingNotifier
from .settings import SettingsStore
from .utils.logger import setup_logger

logger = setup_logger()

app = FastAPI(title="Pinyin Converter", version="0.1.0")

store = SettingsStore(os.getenv("PINYIN_SETTINGS_PATH", "pinyin_settings.json"))

# loaded once; PATCH /settings mutates and persists it
runtime_settings = store.load()


class CursorModel(BaseModel):
    line: int
    ch: int = 0


class SelectionModel(BaseModel):
    anchor: CursorModel
    head: CursorModel


class ConvertRequest(BaseModel):
    document: str
    cursor: CursorModel
    selection: Optional[SelectionModel] = None


class ConvertResponse(BaseModel):
    changed: bool
    document: str
    cursor: CursorModel
    notices: List[str]


@app.get("/")
async def root():
    return {"message": "Pinyin converter is running. Use POST /convert."}


@app.post("/convert", response_model=ConvertResponse)
def convert(req: ConvertRequest):
    buffer = TextBuffer(req.document)
    if not 0 <= req.cursor.line < buffer.line_count():
        raise HTTPException(status_code=400, detail=f"Cursor line {req.cursor.line} is outside the document")
    buffer.set_cursor(Position(req.cursor.line, req.cursor.ch))
    if req.selection is not None:
        buffer.set_selection(
            Position(req.selection.anchor.line, req.selection.anchor.ch),
            Position(req.selection.head.line, req.selection.head.ch),
        )

    notifier = RecordingNotifier()
    changed = PinyinConverter(runtime_settings, notifier=notifier).convert(buffer)
    cursor = buffer.get_cursor()
    logger.debug("[convert] changed=%s notices=%s", changed, notifier.messages)
    return ConvertResponse(
        changed=changed,
        document=buffer.get_value(),
        cursor=CursorModel(line=cursor.line, ch=cursor.ch),
        notices=notifier.transient(),
    )


@app.get("/settings")
async def get_settings():
    return runtime_settings.to_public_dict()


class SettingsPatch(BaseModel):
    base_url: Optional[str] = None
    model: Optional[str] = None
    api_key: Optional[str] = None
    with_context: Optional[bool] = None
    math_mode: Optional[bool] = None
    stepwise: Optional[bool] = None
    context_strategy: Optional[str] = None
    timeout: Optional[float] = None


@app.patch("/settings")
async def patch_settings(s: SettingsPatch):
    # explicit null only makes sense for the timeout
    changes = {k: v for k, v in s.model_dump(exclude_unset=True).items() if v is not None or k == "timeout"}
    try:
        store.update(runtime_settings, **changes)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    logging.info("[settings] model=%s base_url=%s", runtime_settings.model, runtime_settings.base_url)
    return runtime_settings.to_public_dict()


@app.get("/models")
def list_models():
    try:
        client = get_llm_client(runtime_settings)
    except (RuntimeError, ValueError) as exc:
        # Missing API key; return empty list so the UI can warn the user
        logging.info("[models] unavailable: %s", exc)
        return []
    models = client.list_models()
    logging.info("[models] models_found=%d", len(models))
    return models
