from typing import Optional

from models import AppState, PassKind, YesNo
from tools import DateTools


def get_pass_conflict(state: AppState, date: str, kind: PassKind) -> Optional[str]:
    """Return another date in ``date``'s week that already used ``kind``.

    Only reports a double use; nothing here prevents one.
    """
    week_key = DateTools.week_key(date)
    for other, day in state.days.items():
        if other == date:
            continue
        if DateTools.week_key(other) != week_key:
            continue
        if getattr(day, kind.value) == YesNo.YES:
            return other
    return None
