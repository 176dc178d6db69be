from typing import List, Optional

from sqlalchemy.future import select
from sqlalchemy.orm import Session

from autoexit.models.api_configuration import ApiConfiguration
from autoexit.schemas.api_configuration import ApiConfig
from autoexit.utils.constants import DEFAULT_API_CONFIGURATIONS
from autoexit.utils.logging import setup_logging

logger = setup_logging()


def get_enabled_api_configs(db: Session) -> List[ApiConfig]:
    result = db.execute(
        select(ApiConfiguration).where(ApiConfiguration.is_enabled.is_(True))
    )
    return [ApiConfig.model_validate(config) for config in result.scalars().all()]


def find_api_config(api_configs: List[ApiConfig], api_type: str) -> Optional[ApiConfig]:
    return next((c for c in api_configs if c.api_type == api_type and c.is_enabled), None)


def seed_default_api_configs(db: Session) -> int:
    """
    Insert the default API configuration rows when the table is empty
    """
    if db.scalar(select(ApiConfiguration.id).limit(1)) is not None:
        return 0

    for api_type, api_name, base_url, rate_limit in DEFAULT_API_CONFIGURATIONS:
        db.add(ApiConfiguration(
            api_type=api_type,
            api_name=api_name,
            base_url=base_url,
            rate_limit_per_minute=rate_limit,
        ))
    db.commit()
    logger.info(f"Seeded {len(DEFAULT_API_CONFIGURATIONS)} default API configurations")
    return len(DEFAULT_API_CONFIGURATIONS)
