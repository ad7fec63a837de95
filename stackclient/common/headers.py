#    Licensed under the Apache License, Version 2.0 (the "License"); you may
#    not use this file except in compliance with the License. You may obtain
#    a copy of the License at
#
#         http://www.apache.org/licenses/LICENSE-2.0
#
#    Unless required by applicable law or agreed to in writing, software
#    distributed under the License is distributed on an "AS IS" BASIS, WITHOUT
#    WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied. See the
#    License for the specific language governing permissions and limitations
#    under the License.

"""
Decoding of domain records carried in HTTP response headers.

Glance v1 and Swift both return metadata as headers: a fixed set of
single-valued fields under a namespace prefix (``x-image-meta-min-disk``)
and an open-ended set of caller-defined properties under a longer prefix
(``x-image-meta-property-<key>``).  A :class:`HeaderMetadataParser`
subclass declares the fields it expects and turns a header map into an
immutable record, or raises one of the
:class:`~stackclient.common.exceptions.HeaderParseError` subclasses.

Header names are compared case-insensitively.
"""

import datetime
import enum
import re
import types

from oslo_log import log as logging
from oslo_utils import timeutils

from stackclient.common import exceptions as exc

LOG = logging.getLogger(__name__)

STRING = 'string'
INTEGER = 'integer'
BOOLEAN = 'boolean'
TIMESTAMP = 'timestamp'
ENUM = 'enum'

INT64_MIN = -2 ** 63
INT64_MAX = 2 ** 63 - 1

_INTEGER_RE = re.compile(r'^[+-]?[0-9]+\Z')
_ISO8601_SECONDS_RE = re.compile(
    r'^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(Z|[+-]\d{2}(:?\d{2})?)?\Z')
ISO8601_SECONDS_FORMAT = '%Y-%m-%dT%H:%M:%SZ'


def iso8601_seconds_parse(text):
    """Parse an ISO-8601 timestamp with seconds precision.

    Fractional seconds are rejected. A timestamp without an offset is
    taken to be UTC.

    :raises ValueError: if ``text`` is not such a timestamp.
    """
    if not isinstance(text, str) or not _ISO8601_SECONDS_RE.match(text):
        raise ValueError("'%s' is not an ISO-8601 timestamp with seconds "
                         "precision" % text)
    return timeutils.parse_isotime(text)


def iso8601_seconds_format(value):
    """Format a datetime as ``YYYY-MM-DDTHH:MM:SSZ`` in UTC."""
    return timeutils.normalize_time(value).strftime(ISO8601_SECONDS_FORMAT)


def iter_headers(headers):
    """Yield ``(name, value)`` pairs from any supported header map.

    ``headers`` may be a mapping (values either strings or lists of
    strings) or an iterable of pairs.
    """
    items = headers.items() if hasattr(headers, 'items') else headers
    for name, value in items:
        if isinstance(value, (list, tuple)):
            for item in value:
                yield name, item
        else:
            yield name, value


def first_values(headers):
    """Map each lower-cased header name to its first value."""
    result = {}
    for name, value in iter_headers(headers):
        if not name:
            continue
        result.setdefault(name.lower(), value)
    return result


def extract_properties(headers, prefix):
    """Collect the free-form properties carried under ``prefix``.

    Every header whose name starts with ``prefix`` and is strictly longer
    than it contributes one entry: the rest of the name, lower-cased, maps
    to the header value untouched. When two header names differ only by
    case the later one in iteration order wins.
    """
    prefix = prefix.lower()
    properties = {}
    for name, value in iter_headers(headers):
        if not name:
            continue
        lowered = name.lower()
        if lowered.startswith(prefix) and len(lowered) > len(prefix):
            properties[lowered[len(prefix):]] = value
    return properties


def properties_to_headers(properties, prefix, value=None):
    """Bind a mapping of properties to headers under ``prefix``.

    With ``value`` given, every header carries it instead of the property
    value (Swift ignores the value of ``X-Remove-*`` headers).
    """
    headers = {}
    for key, prop in (properties or {}).items():
        headers['%s%s' % (prefix, key)] = prop if value is None else value
    return headers


class HeaderField(object):
    """A single-valued header and the type it decodes to.

    :param key: header key without the namespace prefix, e.g. ``min-disk``
    :param kind: one of ``STRING``, ``INTEGER``, ``BOOLEAN``, ``TIMESTAMP``
                 or ``ENUM``
    :param required: a missing required header fails the whole parse
    :param enum: the ``enum.Enum`` class for ``ENUM`` fields
    :param attr: record attribute name, defaults to ``key`` with
                 underscores
    """

    def __init__(self, key, kind=STRING, required=True, enum=None,
                 attr=None):
        self.key = key
        self.kind = kind
        self.required = required
        self.enum = enum
        self.attr = attr or key.replace('-', '_')

    def __repr__(self):
        return '<HeaderField %s (%s)>' % (self.key, self.kind)


class HeaderMetadataParser(object):
    """Builds an immutable record from a header map.

    Subclasses set ``fields``, ``field_prefix``, ``record_class`` and,
    when the record carries free-form properties, ``property_prefix`` and
    ``properties_attr``.
    """

    fields = ()
    field_prefix = ''
    property_prefix = None
    properties_attr = 'properties'
    record_class = None

    def __init__(self, date_parser=None):
        self.date_parser = date_parser or iso8601_seconds_parse

    def __call__(self, headers):
        return self.parse(headers)

    def header_name(self, field):
        return self.field_prefix + field.key

    def parse(self, headers):
        found = first_values(headers)
        values = {}
        for field in self.fields:
            raw = found.get(self.header_name(field).lower())
            if field.kind == BOOLEAN:
                values[field.attr] = (raw is not None and
                                      raw.lower() == 'true')
            elif raw is None:
                if field.required:
                    raise exc.MissingField(field.key)
                values[field.attr] = None
            else:
                values[field.attr] = self._decode(field, raw)

        if self.property_prefix:
            properties = extract_properties(headers, self.property_prefix)
            LOG.debug("Parsed %(count)d properties from headers: %(keys)s",
                      {'count': len(properties),
                       'keys': ', '.join(sorted(properties))})
            values[self.properties_attr] = properties

        return self.record_class(**values)

    def _decode(self, field, raw):
        if field.kind == STRING:
            return raw
        elif field.kind == INTEGER:
            if not _INTEGER_RE.match(raw):
                raise exc.MalformedField(field.key, raw)
            value = int(raw)
            if not INT64_MIN <= value <= INT64_MAX:
                raise exc.MalformedField(field.key, raw,
                                         'out of 64-bit range')
            return value
        elif field.kind == TIMESTAMP:
            try:
                return self.date_parser(raw)
            except (ValueError, TypeError) as e:
                raise exc.MalformedField(field.key, raw, str(e))
        elif field.kind == ENUM:
            try:
                return field.enum.from_value(raw)
            except ValueError:
                raise exc.UnknownEnumValue(
                    field.key, raw, [m.value for m in field.enum])
        raise ValueError("Unknown header field kind '%s'" % field.kind)

    def to_headers(self, record):
        """Encode ``record`` back into this parser's header convention."""
        headers = {}
        for field in self.fields:
            value = getattr(record, field.attr)
            if value is None:
                continue
            headers[self.header_name(field)] = encode_value(value)
        if self.property_prefix:
            headers.update(properties_to_headers(
                getattr(record, self.properties_attr),
                self.property_prefix))
        return headers


def encode_value(value):
    """Render a decoded field value in its wire form."""
    if isinstance(value, bool):
        return 'True' if value else 'False'
    elif isinstance(value, datetime.datetime):
        return iso8601_seconds_format(value)
    elif isinstance(value, enum.Enum):
        return value.value
    return str(value)


class WireEnum(enum.Enum):
    """A closed vocabulary whose values are the wire tokens."""

    @classmethod
    def from_value(cls, value):
        try:
            return cls(value.lower())
        except (ValueError, AttributeError):
            raise ValueError("'%s' is not a valid %s" % (value, cls.__name__))

    def __str__(self):
        return self.value


class Record(object):
    """Mixin for the ``namedtuple`` records produced by the parsers."""

    __slots__ = ()

    def to_dict(self):
        result = {}
        for key, value in self._asdict().items():
            if isinstance(value, types.MappingProxyType):
                value = dict(value)
            result[key] = value
        return result


def readonly(mapping):
    """Return a read-only copy of ``mapping``."""
    return types.MappingProxyType(dict(mapping or {}))
