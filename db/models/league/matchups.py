from peewee import AutoField, IntegerField, SmallIntegerField, BooleanField, DateTimeField

from db.base import BaseModel, utcnow


class Matchup(BaseModel):
    """
    Head-to-head weekly matchup between two teams.

    Scores are category-win counts and are written as soon as team-week
    stats exist. home_win/away_win stay null until the week is complete.
    """

    id = AutoField(primary_key=True)
    season_id = IntegerField(index=True)  # References Season.id
    week_id = IntegerField(index=True)  # References Week.id
    home_team_id = IntegerField()  # References Team.id
    away_team_id = IntegerField()  # References Team.id

    home_score = SmallIntegerField(null=True)
    away_score = SmallIntegerField(null=True)
    home_win = BooleanField(null=True)
    away_win = BooleanField(null=True)

    created_at = DateTimeField(default=utcnow)
    updated_at = DateTimeField(default=utcnow)

    class Meta:
        table_name = "matchups"
        indexes = (
            (("week_id", "home_team_id", "away_team_id"), True),
        )

    def __repr__(self) -> str:
        return (
            f"<Matchup(id={self.id}, week={self.week_id}, "
            f"{self.home_team_id} {self.home_score} - {self.away_score} {self.away_team_id})>"
        )
