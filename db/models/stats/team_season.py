from peewee import IntegerField, CharField, SmallIntegerField

from db.models.stats.base import StatLineModel


class TeamSeasonStatLine(StatLineModel):
    """
    A team's season (per season type) totals plus standings.

    Attributes:
        team_w / team_l: Matchup wins and losses
        team_hw / team_hl: Wins and losses decided by the home tie-break
        team_cc*: Same counts restricted to conference opponents
        streak: Current result streak, e.g. "3W"
        points: 3 per regulation win, 2 per tie-break win, 1 per tie-break loss
    """

    team_id = IntegerField()  # References Team.id
    season_id = IntegerField(index=True)
    season_type = CharField(max_length=2)
    days = SmallIntegerField(default=0)

    team_w = SmallIntegerField(default=0)
    team_hw = SmallIntegerField(default=0)
    team_hl = SmallIntegerField(default=0)
    team_l = SmallIntegerField(default=0)
    team_ccw = SmallIntegerField(default=0)
    team_cchw = SmallIntegerField(default=0)
    team_cchl = SmallIntegerField(default=0)
    team_ccl = SmallIntegerField(default=0)
    streak = CharField(max_length=10, default="")
    points = SmallIntegerField(default=0)

    overall_rk = SmallIntegerField(null=True)
    conference_rk = SmallIntegerField(null=True)
    wildcard_rk = SmallIntegerField(null=True)
    players_used = SmallIntegerField(default=0)

    class Meta:
        table_name = "team_season_stat_lines"
        indexes = (
            (("team_id", "season_id", "season_type"), True),
        )

    def __repr__(self) -> str:
        return (
            f"<TeamSeasonStatLine(team_id={self.team_id}, "
            f"season={self.season_id}, type={self.season_type})>"
        )
