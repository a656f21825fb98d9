from peewee import IntegerField, SmallIntegerField

from db.models.stats.base import StatLineModel


class TeamWeekStatLine(StatLineModel):
    """A fantasy team's week, rolled up from its team-day rows."""

    team_id = IntegerField()  # References Team.id
    season_id = IntegerField(index=True)
    week_id = IntegerField(index=True)
    days = SmallIntegerField(default=0)

    class Meta:
        table_name = "team_week_stat_lines"
        indexes = (
            (("team_id", "week_id"), True),
        )

    def __repr__(self) -> str:
        return f"<TeamWeekStatLine(team_id={self.team_id}, week_id={self.week_id})>"
