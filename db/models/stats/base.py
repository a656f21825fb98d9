"""
Stat Line Base Model

Shared columns for every derived stat line table. Every stat column is
nullable: NULL means "blank" (the team or player did not play in that
category), which is different from a recorded zero.
"""

from peewee import AutoField, IntegerField, FloatField, DateTimeField

from db.base import BaseModel, utcnow


class StatLineModel(BaseModel):
    """
    Abstract base for player/team day, week and season stat lines.

    Not a table itself; subclasses add their identity columns and the
    natural-key unique index used by upsert_by_keys.
    """

    id = AutoField(primary_key=True)

    # Roster management counters
    gp = IntegerField(null=True)
    mg = IntegerField(null=True)
    ir = IntegerField(null=True)
    ir_plus = IntegerField(null=True)
    gs = IntegerField(null=True)

    # Skater categories
    g = IntegerField(null=True)
    a = IntegerField(null=True)
    p = IntegerField(null=True)
    pm = IntegerField(null=True)
    pim = IntegerField(null=True)
    ppp = IntegerField(null=True)
    sog = IntegerField(null=True)
    hit = IntegerField(null=True)
    blk = IntegerField(null=True)

    # Goalie categories
    w = IntegerField(null=True)
    ga = IntegerField(null=True)
    gaa = FloatField(null=True)
    sv = IntegerField(null=True)
    sa = IntegerField(null=True)
    svp = FloatField(null=True)
    so = IntegerField(null=True)
    toi = FloatField(null=True)

    rating = FloatField(null=True)

    # Roster moves: adds, missed starts, bench starts
    add = IntegerField(null=True)
    ms = IntegerField(null=True)
    bs = IntegerField(null=True)

    # Audit columns
    created_at = DateTimeField(default=utcnow)
    updated_at = DateTimeField(default=utcnow)
