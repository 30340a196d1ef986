# sofakit

Building blocks for clients of CouchDB and CouchDB-like document databases.
The package does not speak HTTP. It wraps objects that you supply, called
"drivers" or "feeds", and adds the following:

- one error type, `CouchError`, which carries an HTTP status code;
- normalisation of JSON documents, whether they arrive as mappings, JSON
  `bytes` or readable streams;
- iterators over rows, changes feeds and bulk-write results;
- attachment (de)serialisation;
- server-level cluster and configuration calls. These raise a clear 501 error
  when the driver lacks them.

## Installation

```
pip install sofakit
```

## Modules

### `sofakit.common`

- `CouchError(message=None, status=500, cause=None)`. The error raised
  throughout the package. `status` is the HTTP status code. A status of
  0 or `None` becomes 500. `str(err)` gives the message, or the cause's text
  when there is no message.
- `missing_arg(name)` returns `CouchError("sofakit: <name> required", 400)`.
- `merge_options(*mappings)` merges option mappings from left to right. It
  returns `None` when the result is empty.
- `normalize_from_json(doc)` decodes JSON `bytes` or a readable stream to a
  `dict`. Any other value is returned unchanged. Invalid JSON, a failing read
  or a JSON value that is not an object raises `CouchError` with status 400.
- `extract_doc_id(doc)` returns the document's `_id` string, or `None`.
- `ResultIterator(feed, initial=None)` wraps a feed whose `next()` returns a
  value or raises `StopIteration`, and which may have a `close()`. Its methods
  are:
  - `next()` returns `True` or `False`;
  - `current()` raises `CouchError` with status 400 when it is called before
    `next()` or after close;
  - `error()` returns the error the feed raised, if any;
  - `close()` is idempotent.

  The iterator can be used in a `for` loop. The loop re-raises the feed's
  error at the end. It also works as a context manager.
- The constants are `VERSION`, `VENDOR`, `SESSION_COOKIE_NAME`
  (`"AuthSession"`), `USER_PREFIX` (`"org.couchdb.user:"`) and
  `END_KEY_SUFFIX` (`"\ufff0"`, for string-range end keys).

### `sofakit.attachments`

- `Attachment` is a dataclass with these fields: `filename`, `content_type`,
  `stub`, `follows`, `content` (a binary stream), `size`, `content_encoding`,
  `encoded_length`, `rev_pos` and `digest`.
  - `validate()` raises when `filename` is empty.
  - `to_json()` returns a JSON-ready dict. Stubs and `follows` attachments
    carry only their metadata. Otherwise the content is read, closed and
    base64-encoded under `"data"`.
  - `Attachment.from_json(data)` accepts text, bytes or a decoded mapping.
- `Attachments` is a dict of attachments keyed by filename.
  `Attachments.from_json(data)` fills in each attachment's `filename`.
- `AttachmentsIterator(source)` yields copies of the attachments that
  `source.next()` returns.

```python
from sofakit.attachments import Attachment

att = Attachment.from_json('{"content_type": "text/plain", "data": "dGVzdCBhdHRhY2htZW50Cg=="}')
print(att.content.read())   # b'test attachment\n'
```

### `sofakit.bulk`

- `bulk_docs(db, docs, *options)` writes many documents at once. `db` must
  have a `driver_db` attribute. When `db.driver_db.bulk_docs(docs, options)`
  exists, it is used. Otherwise each document goes through
  `db.put(doc_id, doc, options)` if it has an `_id`, or through
  `db.create_doc(doc, options)`, which returns `(id, rev)`. A failure is
  recorded in that document's result rather than raised. An empty list
  raises `CouchError` with status 400.
- `BulkResults` is a `ResultIterator` with the properties `id`, `rev` and
  `update_error`. Each property reads `""` or `None` when there is no
  current result.
- `BulkResult`, `EmulatedBulkResults` and `docs_interface_slice` are the
  pieces that `bulk_docs` is built from.

```python
from sofakit.bulk import bulk_docs

class Store:
    driver_db = None  # no native bulk support

    def put(self, doc_id, doc, options):
        return "1-abc"

    def create_doc(self, doc, options):
        return "generated", "1-def"

results = bulk_docs(Store(), [{"_id": "cow"}, b'{"sound": "moo"}'])
while results.next():
    print(results.id, results.rev, results.update_error)
```

### `sofakit.changes`

- `Change` is a dataclass with the fields `id`, `seq`, `deleted`, `changes`
  and `doc`.
- `Changes(feed)` is a `ResultIterator` over `Change` values.
  - The properties `id`, `seq`, `deleted` and `changes` describe the current
    entry.
  - `last_seq`, `pending` and `etag` are read from the feed, either as
    attributes or as methods.
  - `scan_doc()` decodes the entry's raw JSON `doc`. Invalid JSON raises
    `CouchError` with status 500.

### `sofakit.documents`

- `Rows(feed)` is a `ResultIterator` over query rows.
- `Row` holds a fetched document with the fields `content_length`, `rev`,
  `body`, `err` and `attachments`. `scan_doc()` decodes and closes `body`,
  or re-raises `err`.
- The plain dataclasses are `Members`, `Security`, `ClusterConfig`,
  `PurgeResult`, `BulkGetReference` and `RevDiff`.
- `DBStats`. `DBStats.from_driver(stats)` builds it from an object or a
  mapping.

### `sofakit.client`

`Client(driver_client)` offers the server-wide calls:

- `cluster_status(*options)` and `cluster_setup(action)`. These need the
  driver to have both `cluster_status` and `cluster_setup`.
- `config(node)`, `config_section(node, section)`,
  `config_value(node, section, key)`,
  `set_config_value(node, section, key, value)` and
  `delete_config_key(node, section, key)`. These need the driver to have all
  five methods.

When the driver lacks the methods a call needs, that call raises `CouchError`
with status 501.

```python
from sofakit.client import Client
from sofakit.common import CouchError

client = Client(my_driver_client)
try:
    print(client.config_value("node1", "couchdb", "max_document_size"))
except CouchError as exc:
    print(exc.status, exc)
```

## What it does not do

The package has no database handle. No single object gathers document
get/put/delete, queries, compaction, security, copying, attachment upload
or purge behind one API. You call your driver for these operations, and use
the types and iterators above to handle what it returns. The package has no
network transport or storage of its own, and no command-line tool.

## Running the tests

```
pip install -e ".[test]"
pytest
```