"""Unit tests for the Terms-and-Conditions version check."""

import pytest

from authgate.domain.entities import TermsAndConditions, UserProfile
from authgate.domain.entities.user_profile import parse_version


@pytest.mark.parametrize(
    "version, expected",
    [
        ("v1.0.2", (1, 0, 2)),
        ("1.0.2", (1, 0, 2)),
        ("V2.10", (2, 10)),
        ("v1.x.3", (1, 0, 3)),
    ],
)
def test_parse_version(version, expected):
    assert parse_version(version) == expected


@pytest.mark.parametrize(
    "accepted, latest, stale",
    [
        ("v1.0.0", "v1.0.0", False),
        ("v1.0.0", "v1.0.1", True),
        ("v1.9.0", "v1.10.0", True),
        ("v2.0.0", "v1.10.0", False),
        (None, "v1.0.0", True),
    ],
)
def test_needs_tnc_update(accepted, latest, stale):
    profile = UserProfile(email="student@wisc.edu", tnc_version=accepted)
    assert profile.needs_tnc_update(TermsAndConditions(version=latest)) is stale
