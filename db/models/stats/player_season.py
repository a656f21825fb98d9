from peewee import IntegerField, CharField, SmallIntegerField

from db.models.stats.base import StatLineModel


class PlayerSplitStatLine(StatLineModel):
    """A player's season (per season type) on one fantasy team."""

    player_id = IntegerField()  # References Player.id
    team_id = IntegerField()  # References Team.id
    season_id = IntegerField(index=True)
    season_type = CharField(max_length=2)
    player_name = CharField(max_length=100, default="")

    nhl_pos = CharField(max_length=20, default="")
    nhl_team = CharField(max_length=40, default="")
    pos_group = CharField(max_length=1)
    days = SmallIntegerField(default=0)

    class Meta:
        table_name = "player_split_stat_lines"
        indexes = (
            (("player_id", "team_id", "season_id", "season_type"), True),
        )


class PlayerTotalStatLine(StatLineModel):
    """
    A player's season (per season type) across every fantasy team.

    team_ids lists the teams the player was rostered on, in the order of
    their first week.
    """

    player_id = IntegerField()  # References Player.id
    season_id = IntegerField(index=True)
    season_type = CharField(max_length=2)
    team_ids = CharField(max_length=100, default="")
    player_name = CharField(max_length=100, default="")

    nhl_pos = CharField(max_length=20, default="")
    nhl_team = CharField(max_length=40, default="")
    pos_group = CharField(max_length=1)
    days = SmallIntegerField(default=0)

    class Meta:
        table_name = "player_total_stat_lines"
        indexes = (
            (("player_id", "season_id", "season_type"), True),
        )

    def __repr__(self) -> str:
        return (
            f"<PlayerTotalStatLine(player_id={self.player_id}, "
            f"season={self.season_id}, type={self.season_type})>"
        )
