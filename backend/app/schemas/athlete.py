from pydantic import BaseModel, ConfigDict


class DomainLevelRead(BaseModel):
    domain_id: int
    current_xp: int = 0

    model_config = ConfigDict(from_attributes=True)
