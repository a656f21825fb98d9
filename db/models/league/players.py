from peewee import IntegerField, CharField, BooleanField

from db.base import BaseModel


class Player(BaseModel):
    """NHL player known to the league, matched to scraped rows by yahoo_id."""

    id = IntegerField(primary_key=True)
    yahoo_id = CharField(max_length=20, unique=True, null=True)
    name = CharField(max_length=100)
    nhl_pos = CharField(max_length=20, default="")
    is_active = BooleanField(default=True)

    class Meta:
        table_name = "players"

    def __repr__(self) -> str:
        return f"<Player(id={self.id}, name='{self.name}')>"

    @classmethod
    def active_by_yahoo_id(cls) -> dict[str, "Player"]:
        """Lookup of active players keyed by provider id."""
        return {
            str(player.yahoo_id): player
            for player in cls.select().where(cls.is_active == True)  # noqa: E712
            if player.yahoo_id
        }
