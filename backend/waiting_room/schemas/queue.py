from pydantic import BaseModel


class RegisterUserResponse(BaseModel):
    rank: int


class AllowUserResponse(BaseModel):
    requested_count: int
    allowed_count: int


class AllowedUserResponse(BaseModel):
    allowed: bool


class AdmittedUserResponse(BaseModel):
    admitted: bool


class RankNumberResponse(BaseModel):
    rank: int
