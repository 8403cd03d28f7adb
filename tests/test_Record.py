"""Tests for Record."""

import pytest

from Record import Record


class TestRecord:
    def test_fields_and_timestamp(self):
        record = Record(message='hello')
        assert record['message'] == 'hello'
        assert '@timestamp' in record

    def test_explicit_timestamp_kept(self):
        record = Record({'@timestamp': 'then', 'a': 1})
        assert record.get('@timestamp') == 'then'
        assert record.get('missing', 'default') == 'default'

    def test_set_and_item_access(self):
        record = Record(message='x')
        record.set('host', 'h1')
        record['command'] = 'uptime'
        assert record.to_dict()['host'] == 'h1'
        assert record['command'] == 'uptime'

    def test_tag_without_duplicates(self):
        record = Record(message='x')
        record.tag('a')
        record.tag('b')
        record.tag('a')
        assert record['tags'] == ['a', 'b']

    def test_to_dict_is_a_copy(self):
        record = Record(message='x')
        copy = record.to_dict()
        copy['message'] = 'changed'
        assert record['message'] == 'x'

    @pytest.mark.parametrize('existing, expected', [
        (None, ['t']),
        ('x', ['x', 't']),
        (5, [5, 't']),
        (['x'], ['x', 't']),
        (('x', 't'), ['x', 't']),
    ])
    def test_tag_normalizes_existing_tags(self, existing, expected):
        record = Record(message='x', tags=existing)
        record.tag('t')
        assert record['tags'] == expected
