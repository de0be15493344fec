from pydantic import BaseModel, Field


class User(BaseModel):
    email: str
    api_keys: dict[str, str] = Field(default_factory=dict)  # provider name -> credential
    theme: str | None = None  # "dark" | "light"
