import logging
import uuid

import redis

from autoexit.config import REDIS_URL
from autoexit.utils.constants import ERROR_QUEUE_NAME, EXIT_LOCK_PREFIX

logger = logging.getLogger(__name__)

redis_client = redis.StrictRedis.from_url(REDIS_URL, decode_responses=True)


def push_to_redis_queue(data, queue_name=ERROR_QUEUE_NAME):
    """
    push a message to the left side of a redis list
    """
    try:
        redis_client.lpush(queue_name, data)
    except redis.RedisError as e:
        logger.warning(f"Could not push to redis queue {queue_name}: {e} - {data}")


def acquire_exit_lock(position_id: str, ttl: int):
    """
    Take the per position exit lock. Returns the lock token, or None when
    another worker already holds it.
    """
    token = str(uuid.uuid4())
    acquired = redis_client.set(f"{EXIT_LOCK_PREFIX}:{position_id}", token, nx=True, ex=ttl)
    return token if acquired else None


def release_exit_lock(position_id: str, token: str):
    """
    Release the lock only if it still carries our token
    """
    key = f"{EXIT_LOCK_PREFIX}:{position_id}"
    try:
        if redis_client.get(key) == token:
            redis_client.delete(key)
    except redis.RedisError as e:
        logger.warning(f"Could not release exit lock {key}: {e}")
