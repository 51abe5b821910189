import logging
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from quiz_api.core.database import get_db, ping_db
from quiz_api.jobs.queue import redis

logger = logging.getLogger(__name__)
router = APIRouter()

@router.get("")
def api_status(): return {"status": "api is running"}

@router.get("/database")
def database_status(db: Session = Depends(get_db)):
    try:
        ping_db(db)
    except SQLAlchemyError as e:
        logger.error("Database health check failed: %s", e)
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content={"status": "database unavailable"})
    return {"status": "database is ok"}

@router.get("/queue")
def queue_status():
    try:
        redis.ping()
    except RedisError as e:
        logger.error("Redis health check failed: %s", e)
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content={"status": "queue unavailable"})
    return {"status": "queue is ok"}
