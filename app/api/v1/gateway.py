import logging

from fastapi import APIRouter, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.core.config import settings
from app.core.db import SessionLocal, engine
from app.core.errors import StoreBusyError, StoreError
from app.core.gateway import failure_envelope, handle_action, parse_body
from app.core.lock import store_lock
from app.core.store import SqlRecordStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["gateway"])

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

# Database errors carry SQL text and bound values; clients only see these
CONFLICT_MESSAGE = "Record conflicts with stored data"
STORE_FAILED_MESSAGE = "Record store failed"


def _ensure_db():
    if not engine or not SessionLocal:
        raise HTTPException(503, "DB not configured (DATABASE_URL missing)")


def _run_action(action: str | None, params: dict, body: dict) -> dict:
    db = SessionLocal()
    try:
        with store_lock.hold(settings.LOCK_TIMEOUT_SECONDS):
            return handle_action(SqlRecordStore(db), action, params, body)
    except StoreBusyError as e:
        return failure_envelope(e)
    except IntegrityError:
        db.rollback()
        logger.exception("Action %s hit a constraint", action)
        return failure_envelope(StoreError(CONFLICT_MESSAGE))
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Action %s failed in the database", action)
        return failure_envelope(StoreError(STORE_FAILED_MESSAGE))
    except Exception:
        db.rollback()
        logger.exception("Action %s crashed", action)
        return failure_envelope(StoreError(STORE_FAILED_MESSAGE))
    finally:
        db.close()


@router.api_route("/exec", methods=["GET", "POST"])
async def gateway(request: Request):
    """
    Record store gateway: GET_USERS, CREATE_USER, DELETE_USER, GET_WEIGHTS,
    SAVE_WEIGHT, DELETE_WEIGHT. Always answers 200 with an envelope.
    """
    _ensure_db()

    raw = await request.body()
    content_type = request.headers.get("content-type", "")

    # Empty form POST is a browser preflight request
    if request.method == "POST" and content_type.startswith(FORM_CONTENT_TYPE) and not raw:
        return PlainTextResponse("")

    params = dict(request.query_params)
    body = parse_body(raw)

    envelope = await run_in_threadpool(_run_action, params.get("action"), params, body)
    return JSONResponse(envelope)
