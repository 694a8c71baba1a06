# This file is part of curious-presence.
#
# curious-presence is free software: you can redistribute it and/or modify
# it under the terms of the GNU Lesser General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# curious-presence is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Lesser General Public License for more details.
#
# You should have received a copy of the GNU Lesser General Public License
# along with curious-presence.  If not, see <http://www.gnu.org/licenses/>.

"""
Wrappers for Rich Presence activities.

.. currentmodule:: curious_presence.dataclasses.presence
"""
import copy
import enum
from typing import Dict, List

ASSET_KEYS = ('large_image', 'large_text', 'small_image', 'small_text')
SECRET_KEYS = ('join', 'spectate', 'match')


class ActivityType(enum.IntEnum):
    """
    Represents an activity's type.
    """
    #: Shows the ``Playing`` text.
    PLAYING = 0

    #: Shows the ``Listening to`` text.
    LISTENING = 2

    #: Shows the ``Watching`` text.
    WATCHING = 3

    #: Shows the ``Competing in`` text.
    COMPETING = 5


def _make_property(field: str, doc: str = None, max_size: int = None) -> property:
    def _getter(self):
        return self._rich_fields.get(field)

    def _setter(self, value: str):
        if value is None:
            self._rich_fields.pop(field, None)
            return

        if max_size is not None and len(value) > max_size:
            raise ValueError("Field '{}' cannot be longer than {} characters"
                             .format(field, max_size))

        self._rich_fields[field] = value

    prop = property(_getter, _setter, doc=doc)
    return prop


def _make_nested_property(outer: str, field: str, doc: str = None) -> property:
    def _getter(self):
        return self._rich_fields.get(outer, {}).get(field)

    def _setter(self, value):
        if value is None:
            inner = self._rich_fields.get(outer, {})
            inner.pop(field, None)
            if not inner:
                self._rich_fields.pop(outer, None)
            return

        self._rich_fields.setdefault(outer, {})[field] = value

    return property(_getter, _setter, doc=doc)


class RichPresence(object):
    """
    Represents a Rich Presence. This class can be created safely for usage with :class:`.IPCClient`.

    .. code-block:: python3

        presence = RichPresence(state="In a match", details="Ranked")
        presence.start = int(time.time())
        presence.party_size = [1, 4]
        ipc.set_activity(presence)

    """

    def __init__(self, **fields):
        """
        :param fields: The rich presence fields, as they are sent to Discord.
        """
        self._rich_fields = {}
        for key, value in fields.items():
            if isinstance(getattr(type(self), key, None), property):
                setattr(self, key, value)
            else:
                self._rich_fields[key] = value

    def __repr__(self) -> str:
        return "<RichPresence state='{}' details='{}'>".format(self.state, self.details)

    state = _make_property("state", "The state for this presence.", 128)
    details = _make_property("details", "The details for this presence.", 128)

    start = _make_nested_property("timestamps", "start", "The start time, as a Unix timestamp.")
    end = _make_nested_property("timestamps", "end", "The end time, as a Unix timestamp.")

    party_id = _make_nested_property("party", "id", "The party ID for this rich presence.")

    @property
    def activity_type(self) -> ActivityType:
        """
        The :class:`.ActivityType` of this rich presence.
        """
        value = self._rich_fields.get("type")
        if value is None:
            return None

        return ActivityType(value)

    @activity_type.setter
    def activity_type(self, value):
        if value is None:
            self._rich_fields.pop("type", None)
            return

        self._rich_fields["type"] = int(ActivityType(value))

    @property
    def assets(self) -> Dict[str, str]:
        """
        The assets for this rich presence. Returns a dict of
        (large_image, large_text, small_image, small_text).
        """
        return self._rich_fields.get("assets", {})

    @assets.setter
    def assets(self, value: Dict[str, str]):
        for key in value.keys():
            if key not in ASSET_KEYS:
                raise ValueError("Bad asset key: {}".format(key))

        self._rich_fields["assets"] = dict(value)

    @property
    def party_size(self) -> List[int]:
        """
        The size of the party for this rich presence. An array of [size, max].
        """
        return self._rich_fields.get("party", {}).get("size")

    @party_size.setter
    def party_size(self, size: List[int]):
        if size is None:
            party = self._rich_fields.get("party", {})
            party.pop("size", None)
            if not party:
                self._rich_fields.pop("party", None)
            return

        size = list(size)
        if len(size) != 2:
            raise ValueError("Party size must be [size, max]")

        self._rich_fields.setdefault("party", {})["size"] = size

    @property
    def secrets(self) -> Dict[str, str]:
        """
        The secrets for this rich presence. Returns a dict of (join, spectate, match).
        """
        return self._rich_fields.get("secrets", {})

    @secrets.setter
    def secrets(self, value: Dict[str, str]):
        for key in value.keys():
            if key not in SECRET_KEYS:
                raise ValueError("Bad secret key: {}".format(key))

        self._rich_fields["secrets"] = dict(value)

    @property
    def buttons(self) -> List[Dict[str, str]]:
        """
        The buttons for this rich presence, as a list of ``{"label": ..., "url": ...}``.
        Discord allows at most two.
        """
        return self._rich_fields.get("buttons", [])

    @buttons.setter
    def buttons(self, value: List[Dict[str, str]]):
        # discord rejects an empty list, so drop the field entirely
        if not value:
            self._rich_fields.pop("buttons", None)
            return

        if len(value) > 2:
            raise ValueError("A rich presence can have at most 2 buttons")

        buttons = []
        for button in value:
            if set(button.keys()) != {"label", "url"}:
                raise ValueError("Buttons need exactly a label and a url")
            buttons.append(dict(button))

        self._rich_fields["buttons"] = buttons

    def to_dict(self) -> dict:
        """
        :return: The dict representation of this object.
        """
        return copy.deepcopy(self._rich_fields)
