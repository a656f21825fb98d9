from datetime import date
from enum import Enum
from typing import Optional

from peewee import IntegerField, CharField, DateField, BooleanField, SmallIntegerField

from db.base import BaseModel


class SeasonType(str, Enum):
    """Which part of the season a week belongs to."""

    REGULAR_SEASON = "RS"
    PLAYOFFS = "PO"
    LOSERS_TOURNAMENT = "LT"


class Week(BaseModel):
    """
    A scoring week within a season.

    A week is complete once its end date is reached or an admin sets the
    explicit completion marker. Matchup results are only decided for
    complete weeks.
    """

    id = IntegerField(primary_key=True)
    season_id = IntegerField(index=True)  # References Season.id
    week_num = SmallIntegerField()
    week_type = CharField(max_length=2, default=SeasonType.REGULAR_SEASON.value)
    start_date = DateField()
    end_date = DateField()
    is_complete = BooleanField(default=False)

    class Meta:
        table_name = "weeks"

    def __repr__(self) -> str:
        return f"<Week(id={self.id}, season={self.season_id}, num={self.week_num})>"

    def is_complete_on(self, today: date) -> bool:
        """Whether results for this week can be decided as of today."""
        return bool(self.is_complete) or today >= self.end_date

    @classmethod
    def get_for_date(cls, target: date, season_id: Optional[int] = None) -> Optional["Week"]:
        """Get the week whose date range covers target, if any."""
        query = cls.select().where((cls.start_date <= target) & (cls.end_date >= target))
        if season_id is not None:
            query = query.where(cls.season_id == season_id)
        return query.order_by(cls.start_date.desc()).first()

    @classmethod
    def for_season(cls, season_id: int) -> list["Week"]:
        return list(
            cls.select().where(cls.season_id == season_id).order_by(cls.start_date)
        )
