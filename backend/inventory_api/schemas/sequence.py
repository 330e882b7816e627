from pydantic import BaseModel


class SequenceOut(BaseModel):
    """Current state of one code sequence; ``next_code`` is a non-reserving preview."""

    entity_kind: str
    prefix: str
    padding_width: int
    last_value: int
    next_code: str
