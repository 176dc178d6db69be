from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from autoexit.database import get_db
from autoexit.schemas.monitor import MonitorRequest, MonitorResponse
from autoexit.services.auth_service import get_current_user
from autoexit.services.exceptions import NoApiConfigurationError
from autoexit.services.monitor_service import monitor_positions
from autoexit.utils.logging import setup_logging

logger = setup_logging()
router = APIRouter()


@router.post("/", response_model=MonitorResponse, response_model_exclude_none=True)
def auto_exit(
        monitor_request: Optional[MonitorRequest] = None,
        user_id: str = Depends(get_current_user),
        db: Session = Depends(get_db),
):
    monitor_request = monitor_request or MonitorRequest()
    logger.info(f"Auto exit for user={user_id}, positions={monitor_request.position_ids}, "
                f"execute_exits={monitor_request.execute_exits}")

    try:
        return monitor_positions(
            db,
            user_id,
            position_ids=monitor_request.position_ids,
            execute_exits=monitor_request.execute_exits,
        )
    except NoApiConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception(f"Auto-exit error: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")
