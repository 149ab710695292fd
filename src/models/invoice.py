from pydantic import BaseModel, Field

class ExtractTextRequest(BaseModel):
    lines: list[str] = Field(default_factory=list)
    filename: str = Field(default="")
    known_jobsites: list[str] | None = Field(default=None)
    known_clients: list[str] | None = Field(default=None)
