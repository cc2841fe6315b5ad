"""ORM Models — SQLAlchemy declarative models for campaigns and reactions.

Invariants:
    - All models inherit from Base (db/base.py)
    - Campaign owns its reactions; deleting a campaign row cascades

Design Decisions:
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from freecredit.models.campaign import Campaign  # noqa: F401
from freecredit.models.reaction import Reaction  # noqa: F401
