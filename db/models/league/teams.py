from peewee import IntegerField, CharField

from db.base import BaseModel


class Team(BaseModel):
    """
    A franchise's fantasy team for one season.

    Attributes:
        id: League team id (unique across seasons)
        season_id: Season this team plays in
        franchise_id: Franchise the team belongs to
        name: Display name
        yahoo_id: Team id on the roster provider
        conf_id: Conference for standings, null if none
    """

    id = IntegerField(primary_key=True)
    season_id = IntegerField(index=True)  # References Season.id
    franchise_id = IntegerField(null=True)
    name = CharField(max_length=100)
    yahoo_id = CharField(max_length=20, null=True)
    conf_id = IntegerField(null=True)

    class Meta:
        table_name = "teams"

    def __repr__(self) -> str:
        return f"<Team(id={self.id}, season={self.season_id}, name='{self.name}')>"

    @classmethod
    def for_season(cls, season_id: int) -> list["Team"]:
        return list(cls.select().where(cls.season_id == season_id).order_by(cls.id))
