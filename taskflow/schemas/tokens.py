from pydantic import BaseModel

from taskflow.schemas.user import UserBasic


class Token(BaseModel):
    access_token: str
    token_type: str
    user: UserBasic
