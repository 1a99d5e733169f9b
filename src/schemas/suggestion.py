from pydantic import BaseModel


class Suggestion(BaseModel):
    kind: str
    text: str
