# sheetsync/models/schemas.py
from pydantic import BaseModel, Field, StrictInt, StrictStr


class AuthCredential(BaseModel):
    """Reply the client sends back to authReq. Only the wire key sheetID is accepted."""

    token: StrictStr
    sheet_id: StrictInt = Field(alias="sheetID")


class CellWrite(BaseModel):
    """One cell edit, as received in writeCell and broadcast back to the room."""

    line: StrictInt
    column: StrictStr
    content: StrictStr


class AuthRequest(BaseModel):
    login: str
    password: str


class RefreshRequest(BaseModel):
    refresh_token: str
