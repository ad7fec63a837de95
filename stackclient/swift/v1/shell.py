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

from stackclient.common import exceptions
from stackclient.common import utils


def _print_account(account):
    info = account.to_dict()
    metadata = info.pop('metadata', {})
    for key, value in sorted(metadata.items()):
        info['Meta \'%s\'' % key] = value
    utils.print_dict(info)


def do_account_show(sc, args):
    """Show usage counters and metadata of the account."""
    _print_account(sc.object_store.account.get())


@utils.arg('metadata', metavar='<key=value>', nargs='+',
           help='Metadata to create or update.')
def do_account_metadata_set(sc, args):
    """Create or update account metadata."""
    metadata = utils.split_key_value_pairs(args.metadata)
    if not sc.object_store.account.create_or_update_metadata(metadata):
        raise exceptions.CommandError("Account not found")
    _print_account(sc.object_store.account.get())


@utils.arg('keys', metavar='<key>', nargs='+',
           help='Metadata keys to delete.')
def do_account_metadata_delete(sc, args):
    """Delete account metadata."""
    metadata = dict((key, '') for key in args.keys)
    if not sc.object_store.account.delete_metadata(metadata):
        raise exceptions.CommandError("Account not found")
    _print_account(sc.object_store.account.get())
