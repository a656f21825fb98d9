from peewee import IntegerField, CharField, DateField

from db.models.stats.base import StatLineModel


class PlayerDayStatLine(StatLineModel):
    """
    One player's stat line for one calendar date on one fantasy team.

    Written by every scrape cycle for the date and deleted when the player
    is no longer on that team's roster for the date.
    """

    player_id = IntegerField()  # References Player.id
    team_id = IntegerField()  # References Team.id
    season_id = IntegerField(index=True)
    week_id = IntegerField(null=True, index=True)
    date = DateField(index=True)

    player_name = CharField(max_length=100, default="")
    yahoo_id = CharField(max_length=20, null=True)
    nhl_pos = CharField(max_length=20, default="")
    nhl_team = CharField(max_length=20, default="")
    pos_group = CharField(max_length=1)  # F, D or G
    best_pos = CharField(max_length=10, default="")
    full_pos = CharField(max_length=10, default="")

    class Meta:
        table_name = "player_day_stat_lines"
        indexes = (
            (("player_id", "team_id", "date"), True),
        )

    def __repr__(self) -> str:
        return (
            f"<PlayerDayStatLine(player_id={self.player_id}, "
            f"team_id={self.team_id}, date={self.date})>"
        )
