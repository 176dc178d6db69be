from typing import Optional

from pydantic import BaseModel, ConfigDict


class ApiConfig(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: Optional[str] = None
    api_type: str
    api_name: str = ""
    base_url: str
    api_key_encrypted: Optional[str] = None
    is_enabled: bool = True
    rate_limit_per_minute: int = 60

    @property
    def api_key(self) -> Optional[str]:
        return self.api_key_encrypted or None
