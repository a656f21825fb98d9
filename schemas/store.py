from pydantic import BaseModel


class UpsertResult(BaseModel):
    """Outcome of one upsert_by_keys batch"""

    table: str
    created: int = 0
    updated: int = 0
    deleted: int = 0
    errors: list[str] = []

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def written(self) -> int:
        return self.created + self.updated
