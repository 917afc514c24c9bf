"""Unit tests for order block reference numbers"""

from orderlink.models import AppSetting
from orderlink.order_blocks.reference import REFERENCE_COUNTER_KEY, format_reference, next_reference


def test_format_reference_pads_to_three_digits():
    assert format_reference(1) == "npdf001"
    assert format_reference(42) == "npdf042"
    assert format_reference(1000) == "npdf1000"


def test_counter_starts_at_one_and_increments(db_session):
    assert next_reference(db_session) == "npdf001"
    assert next_reference(db_session) == "npdf002"
    db_session.commit()

    setting = db_session.get(AppSetting, REFERENCE_COUNTER_KEY)
    assert setting.value == "2"


def test_counter_continues_from_stored_value(db_session):
    db_session.add(AppSetting(key=REFERENCE_COUNTER_KEY, value="41"))
    db_session.commit()

    assert next_reference(db_session) == "npdf042"
