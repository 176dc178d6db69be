import logging

from autoexit.config import MONITOR_EXECUTE_EXITS
from autoexit.core.celery_app import celery_app
from autoexit.database import get_task_db
from autoexit.services.exceptions import NoApiConfigurationError
from autoexit.services.monitor_service import monitor_positions, report_error
from autoexit.services.position_service import get_users_with_open_positions

logger = logging.getLogger(__name__)


def monitor_open_positions_sync(execute_exits: bool = MONITOR_EXECUTE_EXITS) -> dict:
    """
    One monitoring cycle per user owning open positions, each with its own
    session. Returns the summary of every user that was processed.
    """
    logger.info("Starting monitor_open_positions_sync")

    with get_task_db() as db:
        user_ids = get_users_with_open_positions(db)

    summaries = {}
    for user_id in user_ids:
        try:
            with get_task_db() as db:
                response = monitor_positions(db, user_id, execute_exits=execute_exits)
        except NoApiConfigurationError as e:
            report_error(f"Monitoring stopped - {e}")
            break
        except Exception as e:
            report_error(f"While monitoring positions of user {user_id} - {e}")
            continue
        summaries[user_id] = response.summary.model_dump()

    logger.info(f"Finished monitor_open_positions_sync for {len(summaries)}/{len(user_ids)} users")
    return summaries


@celery_app.task(name='autoexit.tasks.position_monitor.monitor_open_positions')
def monitor_open_positions():
    logger.info("Starting monitor_open_positions task")
    return monitor_open_positions_sync()
