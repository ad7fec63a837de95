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

import re
import sys

from oslo_utils import encodeutils

from stackclient.i18n import _


class BaseException(Exception):
    """An error occurred."""
    def __init__(self, message=None):
        self.message = message

    def __str__(self):
        return self.message or self.__class__.__doc__


class CommandError(BaseException):
    """Invalid usage of CLI."""


class InvalidEndpoint(BaseException):
    """The provided endpoint is invalid."""


class CommunicationError(BaseException):
    """Unable to communicate with server."""


class NotFound(BaseException):
    """No resource matched the search."""


class NoUniqueMatch(BaseException):
    """Multiple resources matched the search."""


class HeaderParseError(BaseException):
    """Response headers could not be decoded."""

    def __init__(self, field, message=None):
        self.field = field
        super(HeaderParseError, self).__init__(message)


class MissingField(HeaderParseError):
    """A required header was absent."""

    def __init__(self, field):
        message = _("Required header field '%s' is missing") % field
        super(MissingField, self).__init__(field, message)


class MalformedField(HeaderParseError):
    """A header was present but could not be decoded."""

    def __init__(self, field, value, reason=None):
        self.value = value
        message = (_("Header field '%(field)s' has malformed value "
                     "%(value)r") % {'field': field, 'value': value})
        if reason:
            message = '%s: %s' % (message, reason)
        super(MalformedField, self).__init__(field, message)


class UnknownEnumValue(MalformedField):
    """A closed-vocabulary header carried an unknown token."""

    def __init__(self, field, value, choices=()):
        self.choices = tuple(choices)
        reason = None
        if self.choices:
            reason = _("expected one of %s") % ', '.join(self.choices)
        super(UnknownEnumValue, self).__init__(field, value, reason)


class ClientException(Exception):
    """DEPRECATED!"""


class HTTPException(ClientException):
    """Base exception for all HTTP-derived exceptions."""
    code = 'N/A'

    def __init__(self, details=None):
        self.details = details or self.__class__.__name__

    def __str__(self):
        return "%s (HTTP %s)" % (self.details, self.code)


class HTTPMultipleChoices(HTTPException):
    code = 300

    def __str__(self):
        message = "Requested version of OpenStack API is not available."
        return "%s (HTTP %s) %s" % (self.details, self.code, message)


class HTTPBadRequest(HTTPException):
    code = 400


class HTTPUnauthorized(HTTPException):
    code = 401


class HTTPForbidden(HTTPException):
    code = 403


class HTTPNotFound(HTTPException):
    code = 404


class HTTPMethodNotAllowed(HTTPException):
    code = 405


class HTTPConflict(HTTPException):
    code = 409


class HTTPOverLimit(HTTPException):
    code = 413


class HTTPUnsupported(HTTPException):
    code = 415


class HTTPInternalServerError(HTTPException):
    code = 500


class HTTPNotImplemented(HTTPException):
    code = 501


class HTTPBadGateway(HTTPException):
    code = 502


class HTTPServiceUnavailable(HTTPException):
    code = 503


# NOTE(bcwaldon): Build a mapping of HTTP codes to corresponding exception
# classes
_code_map = {}
for obj_name in dir(sys.modules[__name__]):
    if obj_name.startswith('HTTP'):
        obj = getattr(sys.modules[__name__], obj_name)
        if isinstance(obj, type) and issubclass(obj, HTTPException):
            _code_map[obj.code] = obj


def from_response(response):
    """Return an instance of an HTTPException based on requests response."""
    cls = _code_map.get(response.status_code, HTTPException)
    content_type = response.headers.get('content-type', '')

    if 'json' in content_type:
        try:
            body = response.json()
        except ValueError:
            return cls()
        details = None
        if isinstance(body, dict) and body:
            error = body[list(body)[0]]
            if isinstance(error, dict):
                details = error.get('message') or error.get('details')
            else:
                details = error
        return cls(details=details)
    elif 'html' in content_type:
        # Split the lines, strip whitespace and inline HTML from the response.
        details = [re.sub(r'<.+?>', '', line.strip())
                   for line in response.text.splitlines()]
        details = [line for line in details if line]
        # Remove duplicates from the list.
        seen = set()
        unique = []
        for line in details:
            if line not in seen:
                unique.append(line)
                seen.add(line)
        return cls(details=': '.join(unique))
    elif response.text:
        details = encodeutils.safe_decode(response.text)
        return cls(details=details.replace('\n\n', '\n'))
    return cls()
