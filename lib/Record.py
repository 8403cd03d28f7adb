"""
Record Module

A Record is the structured unit handed to a record sink. It is a
thin mapping of field names to values, created by a decoder and
enriched with host and command fields before emission.
"""

## version related
__author__ = "Kyle"
__version__ = "0.1.0"
__email__ = "kyle@hacking-linux.com"

## import builtin pkgs
from datetime import datetime, timezone

class Record(object):
    """
    Structured record.

    Every record carries an '@timestamp' field set at creation
    time, unless the caller provides one.
    """

    def __init__(self, fields: dict = None, **kwargs) -> None:
        self._fields = {}
        self._fields.update(fields or {})
        self._fields.update(kwargs)
        self._fields.setdefault('@timestamp', datetime.now(timezone.utc).isoformat())

    def get(self, key: str, default = None):
        return self._fields.get(key, default)

    def set(self, key: str, value) -> None:
        self._fields[key] = value

    def __getitem__(self, key: str):
        return self._fields[key]

    def __setitem__(self, key: str, value) -> None:
        self._fields[key] = value

    def __contains__(self, key: str) -> bool:
        return key in self._fields

    def __eq__(self, other) -> bool:
        if not isinstance(other, Record):
            return NotImplemented

        return self._fields == other._fields

    def __repr__(self) -> str:
        return 'Record(%r)' % (self._fields, )

    def tag(self, name: str) -> None:
        """
        Add a tag to the 'tags' field, ignoring duplicates.

        Args:
            name (str): Tag to add

        Returns:
            None
        """

        ## decoders may hand over 'tags' of any shape
        tags = self._fields.get('tags')
        if tags is None:
            tags = []

        elif isinstance(tags, tuple):
            tags = list(tags)

        elif not isinstance(tags, list):
            tags = [tags]

        self._fields['tags'] = tags

        if name not in tags:
            tags.append(name)

    def to_dict(self) -> dict:
        return dict(self._fields)
