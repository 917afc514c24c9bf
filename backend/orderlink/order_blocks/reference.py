"""Order block reference numbers (npdf001, npdf002, ...)."""

from sqlalchemy.orm import Session

from ..models.app_setting import AppSetting

REFERENCE_COUNTER_KEY = "npdfIdCounter"
REFERENCE_PREFIX = "npdf"


def format_reference(number: int) -> str:
    return f"{REFERENCE_PREFIX}{number:03d}"


def next_reference(db: Session) -> str:
    """Increment the counter in the caller's transaction and format it.

    The counter row is locked FOR UPDATE on databases that support it, so
    concurrent requests serialize on it until the caller commits.
    """
    setting = db.query(AppSetting).filter(
        AppSetting.key == REFERENCE_COUNTER_KEY
    ).with_for_update().first()

    if setting:
        number = int(setting.value) + 1
        setting.value = str(number)
    else:
        number = 1
        db.add(AppSetting(key=REFERENCE_COUNTER_KEY, value=str(number)))

    db.flush()
    return format_reference(number)
