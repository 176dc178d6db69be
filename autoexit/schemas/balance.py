from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BalanceRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    public_key: str = ""


class BalanceResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool
    public_key: str
    balance_lamports: int
    balance_sol: float
