"""
Record Sink Module

Append-only destinations for Records. Every sink exposes
append(record) and close(). Sinks may be shared by several exec
inputs running on different threads, so each one is thread-safe.

- QueueSink:  in-process queue.Queue, for embedding and tests
- StdoutSink: one JSON document per line on a text stream
- SQLSink:    rows in a SQLAlchemy table (MySQL via PyMySQL)
"""

## version related
__author__ = "Kyle"
__version__ = "0.1.0"
__email__ = "kyle@hacking-linux.com"

## import builtin pkgs
import sys
import json
import queue
from threading import Lock
from urllib.parse import quote_plus
from sqlalchemy import create_engine, MetaData, Table, Column, Integer, String, Text

## import private pkgs
from Record import Record

def _as_dict(record) -> dict:
    if isinstance(record, Record):
        return record.to_dict()

    return dict(record)

class RecordSink(object):
    """
    Base record sink.
    """

    def append(self, record: Record) -> None:
        raise NotImplementedError

    def close(self) -> None:
        return None

class QueueSink(RecordSink):
    """
    Sink backed by an unbounded queue.Queue.
    """

    def __init__(self, maxsize: int = 0) -> None:
        self.queue = queue.Queue(maxsize = maxsize)

    def append(self, record: Record) -> None:
        self.queue.put(record)

    def drain(self) -> list:
        """
        Pop every record currently queued.

        Returns:
            list: Records in append order
        """

        records = []
        while True:
            try:
                records.append(self.queue.get_nowait())

            except queue.Empty:
                return records

class StdoutSink(RecordSink):
    """
    Sink writing JSON lines to a text stream (sys.stdout by default).
    """

    def __init__(self, stream = None) -> None:
        self.stream = stream or sys.stdout
        self._lock = Lock()

    def append(self, record: Record) -> None:
        line = json.dumps(_as_dict(record), default = str, ensure_ascii = False)
        with self._lock:
            self.stream.write(line + '\n')
            self.stream.flush()

class SQLSink(RecordSink):
    """
    Sink persisting records into a database table.

    The table is created on first use if it does not exist.
    Well-known fields get their own column; the full record is
    stored as JSON text in 'fields'.
    """

    def __init__(self, logger: object, url: str, table: str = 'exec_records') -> None:
        """
        Initialize the SQL sink.

        Args:
            logger (object): Application logger
            url (str): SQLAlchemy database URL
            table (str): Table name

        Returns:
            None
        """

        self.logger = logger
        self.engine = create_engine(url, pool_pre_ping = True)

        ## table definition
        self.metadata = MetaData()
        self.table = Table(
            table,
            self.metadata,
            Column('id', Integer, primary_key = True, autoincrement = True),
            Column('timestamp', String(64)),
            Column('host', String(255)),
            Column('command', Text),
            Column('message', Text),
            Column('fields', Text),
        )
        self.metadata.create_all(self.engine)
        self.logger.info({'status': 'sql sink ready', 'table': table})

    @classmethod
    def from_mysql(cls, logger: object, host: str, port: int, username: str, password: str, database: str, charset: str, table: str = 'exec_records') -> 'SQLSink':
        """
        Build a SQL sink for a MySQL database through PyMySQL.

        Returns:
            SQLSink: Sink instance
        """

        url = 'mysql+pymysql://%s:%s@%s:%s/%s?charset=%s' % (username, quote_plus(password), host, port, database, charset)
        return cls(logger, url, table)

    def append(self, record: Record) -> None:
        fields = _as_dict(record)
        row = {
            'timestamp': fields.get('@timestamp'),
            'host': fields.get('host'),
            'command': fields.get('command'),
            'message': fields.get('message'),
            'fields': json.dumps(fields, default = str, ensure_ascii = False),
        }

        with self.engine.begin() as conn:
            conn.execute(self.table.insert(), [row])

    def close(self) -> None:
        self.engine.dispose()
        self.logger.info({'status': 'sql sink closed'})
