import pytest

from curious_presence.dataclasses.presence import ActivityType, RichPresence


def test_fields_map_to_activity_payload():
    presence = RichPresence(state="In a match", details="Ranked")
    presence.start = 1507665886
    presence.party_id = "ae488379-351d-4a4f-ad32-2b9b01c91657"
    presence.party_size = [1, 5]
    presence.assets = {"large_image": "map", "large_text": "Summoner's Rift"}
    presence.secrets = {"join": "MTI4NzM0OjFpMmhuZToxMjMxMjM="}
    presence.buttons = [{"label": "Watch", "url": "https://example.com"}]
    presence.activity_type = ActivityType.COMPETING

    assert presence.to_dict() == {
        "state": "In a match",
        "details": "Ranked",
        "timestamps": {"start": 1507665886},
        "party": {"id": "ae488379-351d-4a4f-ad32-2b9b01c91657", "size": [1, 5]},
        "assets": {"large_image": "map", "large_text": "Summoner's Rift"},
        "secrets": {"join": "MTI4NzM0OjFpMmhuZToxMjMxMjM="},
        "buttons": [{"label": "Watch", "url": "https://example.com"}],
        "type": 5,
    }
    assert presence.activity_type is ActivityType.COMPETING


def test_constructor_goes_through_validation():
    with pytest.raises(ValueError):
        RichPresence(state="x" * 129)


def test_unknown_constructor_fields_pass_through():
    assert RichPresence(instance=True).to_dict() == {"instance": True}


def test_none_removes_field():
    presence = RichPresence(state="foo")
    presence.start = 10

    presence.state = None
    presence.start = None

    assert presence.to_dict() == {}


@pytest.mark.parametrize("attr,value", [
    ("assets", {"huge_image": "x"}),
    ("secrets", {"password": "x"}),
    ("party_size", [1]),
    ("buttons", [{"label": "a", "url": "b"}] * 3),
    ("buttons", [{"label": "a"}]),
])
def test_invalid_values(attr, value):
    with pytest.raises(ValueError):
        setattr(RichPresence(), attr, value)


def test_empty_buttons_are_dropped():
    presence = RichPresence(buttons=[{"label": "a", "url": "b"}])

    presence.buttons = []

    assert "buttons" not in presence.to_dict()


def test_to_dict_is_a_copy():
    presence = RichPresence(assets={"large_image": "map"})

    presence.to_dict()["assets"]["large_image"] = "changed"

    assert presence.assets == {"large_image": "map"}


def test_party_size_none_removes_field():
    presence = RichPresence(party_size=[1, 4])
    presence.party_size = None
    assert presence.to_dict() == {}

    presence = RichPresence(party_size=[1, 4])
    presence.party_id = "party"
    presence.party_size = None
    assert presence.to_dict() == {"party": {"id": "party"}}
