import pytest

from hotzones.privacy import REDACTED, check_privacy, redact, validate_ai_metadata


def test_clean_summary():
    result = check_privacy("Busy intersection with steady vehicle traffic during daytime.")
    assert result.is_clean
    assert result.violations == []


def test_license_plate_is_flagged():
    result = check_privacy("ABC-1234")
    assert not result.is_clean
    assert [v.type for v in result.violations] == ["license-plate"]


def test_license_plate_pattern_is_case_sensitive():
    assert check_privacy("abc-1234").is_clean


@pytest.mark.parametrize(
    "text, kind",
    [
        ("A man named Joe crosses the street", "identity"),
        ("Someone wearing a red jacket", "specific-person"),
        ("An officer directs traffic", "agency"),
        ("The plate number is visible", "license-plate"),
    ],
)
def test_pattern_sets(text, kind):
    result = check_privacy(text)
    assert kind in {v.type for v in result.violations}


def test_validate_checks_tags():
    result = validate_ai_metadata("Quiet park at dusk.", ["park", "badge"])
    assert not result.is_clean
    assert [v.type for v in result.violations] == ["agency"]


def test_validate_clean_metadata():
    assert validate_ai_metadata("Quiet park at dusk.", ["park", "dusk", "low-activity"]).is_clean


def test_redact():
    assert redact("An officer nearby") == f"An {REDACTED} nearby"
