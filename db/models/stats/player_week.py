from peewee import IntegerField, CharField, SmallIntegerField

from db.models.stats.base import StatLineModel


class PlayerWeekStatLine(StatLineModel):
    """A player's week on one fantasy team, rolled up from player days."""

    player_id = IntegerField()  # References Player.id
    team_id = IntegerField()  # References Team.id
    season_id = IntegerField(index=True)
    week_id = IntegerField(index=True)
    season_type = CharField(max_length=2, default="RS")
    player_name = CharField(max_length=100, default="")
    yahoo_id = CharField(max_length=20, null=True)

    nhl_pos = CharField(max_length=20, default="")
    nhl_team = CharField(max_length=20, default="")
    pos_group = CharField(max_length=1)
    days = SmallIntegerField(default=0)

    class Meta:
        table_name = "player_week_stat_lines"
        indexes = (
            (("player_id", "week_id", "team_id"), True),
        )

    def __repr__(self) -> str:
        return (
            f"<PlayerWeekStatLine(player_id={self.player_id}, "
            f"team_id={self.team_id}, week_id={self.week_id})>"
        )
