from datetime import date
from typing import Optional

from peewee import IntegerField, CharField, DateField

from db.base import BaseModel


class Season(BaseModel):
    """
    One league season.

    Season ids are sequential integers; category rules are keyed on them
    (e.g. plus/minus only scored through season 6).
    """

    id = IntegerField(primary_key=True)
    name = CharField(max_length=50)
    start_date = DateField()
    end_date = DateField()

    class Meta:
        table_name = "seasons"

    def __repr__(self) -> str:
        return f"<Season(id={self.id}, name='{self.name}')>"

    @classmethod
    def get_for_date(cls, target: date) -> Optional["Season"]:
        """Get the season whose date range covers target, if any."""
        return (
            cls.select()
            .where((cls.start_date <= target) & (cls.end_date >= target))
            .order_by(cls.start_date.desc())
            .first()
        )
