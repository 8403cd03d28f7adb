"""
Decoder Module

Decoders turn a raw chunk of command output into zero or more
Records. A decoder is any object exposing decode(bytes) returning
a list of Records; this module ships the two built-in ones.

- plain: one record per chunk, the decoded text as 'message'
- json:  one record per chunk, the JSON object keys as fields
"""

## version related
__author__ = "Kyle"
__version__ = "0.1.0"
__email__ = "kyle@hacking-linux.com"

## import builtin pkgs
import json

## import private pkgs
from Record import Record

class PlainDecoder(object):
    """
    Line-oriented plain text decoder.

    Undecodable bytes are replaced instead of raising, and one
    trailing line terminator is stripped from the chunk.
    """

    name = 'plain'

    def __init__(self, charset: str = 'utf-8') -> None:
        self.charset = charset

    def _text(self, data) -> str:
        if isinstance(data, bytes):
            data = data.decode(self.charset, errors = 'replace')

        if data.endswith('\r\n'):
            return data[:-2]

        if data.endswith('\n'):
            return data[:-1]

        return data

    def decode(self, data) -> list:
        return [Record(message = self._text(data))]

class JSONDecoder(PlainDecoder):
    """
    JSON object decoder.

    Malformed input does not raise: the raw text becomes the
    'message' of a record tagged '_jsonparsefailure'. Blank chunks
    produce no record.
    """

    name = 'json'

    PARSE_FAILURE_TAG = '_jsonparsefailure'

    def decode(self, data) -> list:
        text = self._text(data)
        if not text.strip():
            return []

        try:
            parsed = json.loads(text)

        except ValueError:
            parsed = None

        if not isinstance(parsed, dict):
            record = Record(message = text)
            record.tag(self.PARSE_FAILURE_TAG)
            return [record]

        return [Record(parsed)]

DECODERS = {
    PlainDecoder.name: PlainDecoder,
    JSONDecoder.name: JSONDecoder,
}

def get_decoder(name: str = 'plain', **options):
    """
    Build a decoder by name.

    Args:
        name (str): Decoder name, one of DECODERS
        options (dict): Keyword arguments for the decoder class

    Returns:
        object: Decoder instance

    Raises:
        ValueError: If the name is unknown
    """

    try:
        cls = DECODERS[name]

    except KeyError:
        raise ValueError('unknown codec %r, expected one of %s' % (name, ', '.join(sorted(DECODERS)))) from None

    return cls(**options)
