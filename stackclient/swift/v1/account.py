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
Swift account API.

Account metadata travels as ``X-Account-Meta-<key>`` headers; it is read
back by :class:`AccountParser` and written by
:meth:`AccountManager.create_or_update_metadata` and
:meth:`AccountManager.delete_metadata`.
"""

import collections

from oslo_log import log as logging

from stackclient.common import base
from stackclient.common import exceptions as exc
from stackclient.common import headers as hdr

LOG = logging.getLogger(__name__)

ACCOUNT_PREFIX = 'x-account-'
ACCOUNT_META_PREFIX = 'X-Account-Meta-'
ACCOUNT_REMOVE_META_PREFIX = 'X-Remove-Account-Meta-'
REMOVAL_VALUE = 'ignored'


_Account = collections.namedtuple('Account', [
    'container_count', 'object_count', 'bytes_used', 'metadata'])


class Account(_Account, hdr.Record):
    """Usage counters and metadata of a Swift account."""

    __slots__ = ()

    def __new__(cls, container_count=None, object_count=None,
                bytes_used=None, metadata=None):
        return super(Account, cls).__new__(
            cls, container_count, object_count, bytes_used,
            hdr.readonly(metadata))


class AccountParser(hdr.HeaderMetadataParser):
    field_prefix = ACCOUNT_PREFIX
    property_prefix = ACCOUNT_META_PREFIX
    properties_attr = 'metadata'
    record_class = Account
    fields = (
        hdr.HeaderField('container-count', hdr.INTEGER, required=False),
        hdr.HeaderField('object-count', hdr.INTEGER, required=False),
        hdr.HeaderField('bytes-used', hdr.INTEGER, required=False),
    )


def bind_metadata(metadata):
    return hdr.properties_to_headers(metadata, ACCOUNT_META_PREFIX)


def bind_metadata_removal(metadata):
    return hdr.properties_to_headers(metadata, ACCOUNT_REMOVE_META_PREFIX,
                                     value=REMOVAL_VALUE)


class AccountManager(base.Manager):
    """Operations on the account the storage URL points at."""

    def __init__(self, api, date_parser=None):
        super(AccountManager, self).__init__(api)
        self.parser = AccountParser(date_parser=date_parser)

    def get(self):
        """Get the :class:`Account`."""
        return self.parser.parse(self._head(''))

    def create_or_update_metadata(self, metadata):
        """Create or update account metadata.

        :param metadata: mapping of metadata keys to values
        :returns: True if the metadata was stored, False if the account was
                  not found
        """
        return self._post(bind_metadata(metadata))

    def delete_metadata(self, metadata):
        """Delete account metadata.

        :param metadata: mapping whose keys name the metadata to remove;
                         values are ignored
        :returns: True if the metadata was removed, False if the account
                  was not found
        """
        return self._post(bind_metadata_removal(metadata))

    def _post(self, headers):
        try:
            self.api.request('', 'POST', headers=headers)
        except exc.HTTPNotFound:
            LOG.debug("Account not found, metadata was not changed")
            return False
        return True
