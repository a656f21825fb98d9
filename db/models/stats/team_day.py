from peewee import IntegerField, DateField

from db.models.stats.base import StatLineModel


class TeamDayStatLine(StatLineModel):
    """
    A fantasy team's aggregated lineup for one date.

    Fully derived from PlayerDayStatLine rows and recomputed on every run;
    never edited by hand.
    """

    team_id = IntegerField()  # References Team.id
    season_id = IntegerField(index=True)
    week_id = IntegerField(null=True, index=True)
    date = DateField(index=True)

    class Meta:
        table_name = "team_day_stat_lines"
        indexes = (
            (("team_id", "date"), True),
        )

    def __repr__(self) -> str:
        return f"<TeamDayStatLine(team_id={self.team_id}, date={self.date})>"
