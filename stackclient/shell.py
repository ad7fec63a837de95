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
Command-line interface to the OpenStack image and object storage APIs.
"""

import argparse
import sys

from oslo_log import handlers
from oslo_log import log as logging

import stackclient
from stackclient import client as stack_client
from stackclient.common import exceptions as exc
from stackclient.common import utils
from stackclient.i18n import _

logger = logging.getLogger(__name__)

SUBCOMMAND_MODULES = (
    ('glance', 'shell'),
    ('swift', 'shell'),
)


class ClientManager(object):
    """Builds the per-service clients on first use from parsed arguments."""

    def __init__(self, args):
        self.args = args
        self._image = None
        self._object_store = None

    def _kwargs(self):
        kwargs = {
            'token': self.args.os_auth_token,
            'insecure': self.args.insecure,
            'cacert': self.args.os_cacert,
            'region_name': self.args.os_region_name,
        }
        if self.args.api_timeout:
            kwargs['timeout'] = self.args.api_timeout
        return kwargs

    @property
    def image(self):
        if self._image is None:
            if not self.args.os_image_url:
                raise exc.CommandError(_(
                    "You must provide an image service URL via either "
                    "--os-image-url or env[OS_IMAGE_URL]"))
            self._image = stack_client.Client(
                'image', self.args.image_api_version,
                self.args.os_image_url, **self._kwargs())
        return self._image

    @property
    def object_store(self):
        if self._object_store is None:
            if not self.args.os_storage_url:
                raise exc.CommandError(_(
                    "You must provide a storage URL via either "
                    "--os-storage-url or env[OS_STORAGE_URL]"))
            self._object_store = stack_client.Client(
                'object-store', self.args.object_store_api_version,
                self.args.os_storage_url, **self._kwargs())
        return self._object_store


class StackShell(object):

    debug = False

    def get_base_parser(self):

        parser = argparse.ArgumentParser(
            prog='stackclient',
            description=__doc__.strip(),
            epilog='See "stackclient help COMMAND" '
                   'for help on a specific command.',
            add_help=False,
            formatter_class=HelpFormatter,
        )

        # Global arguments
        parser.add_argument('-h', '--help',
                            action='store_true',
                            help=argparse.SUPPRESS, )

        parser.add_argument('--version',
                            action='version',
                            version=stackclient.__version__,
                            help="Show program's version number and exit.")

        parser.add_argument('-d', '--debug',
                            default=bool(utils.env('STACKCLIENT_DEBUG')),
                            action='store_true',
                            help='Defaults to env[STACKCLIENT_DEBUG].')

        parser.add_argument('--api-timeout',
                            help='Number of seconds to wait for an '
                                 'API response, '
                                 'defaults to system socket timeout.')

        parser.add_argument('--insecure',
                            default=False, action='store_true',
                            help='Explicitly allow the client to perform '
                                 '"insecure" TLS (https) requests.')

        parser.add_argument('--os-cacert',
                            metavar='<ca-certificate-file>',
                            default=utils.env('OS_CACERT', default=None),
                            help='Defaults to env[OS_CACERT].')

        parser.add_argument('--os-region-name',
                            default=utils.env('OS_REGION_NAME'),
                            help='Defaults to env[OS_REGION_NAME].')

        parser.add_argument('--os-auth-token',
                            default=utils.env('OS_AUTH_TOKEN'),
                            help='Defaults to env[OS_AUTH_TOKEN].')

        parser.add_argument('--os-image-url',
                            default=utils.env('OS_IMAGE_URL'),
                            help='Defaults to env[OS_IMAGE_URL].')

        parser.add_argument('--os-storage-url',
                            default=utils.env('OS_STORAGE_URL'),
                            help='Defaults to env[OS_STORAGE_URL].')

        parser.add_argument('--image-api-version',
                            default=utils.env(
                                'OS_IMAGE_API_VERSION', default='1'),
                            help='Defaults to env[OS_IMAGE_API_VERSION] '
                                 'or 1.')

        parser.add_argument('--object-store-api-version',
                            default=utils.env(
                                'OS_OBJECT_STORE_API_VERSION', default='1'),
                            help='Defaults to env[OS_OBJECT_STORE_API_VERSION]'
                                 ' or 1.')

        return parser

    def get_subcommand_parser(self, options):
        parser = self.get_base_parser()

        self.subcommands = {}
        subparsers = parser.add_subparsers(metavar='<subcommand>')
        versions = {
            'glance': options.image_api_version,
            'swift': options.object_store_api_version,
        }
        for package, submodule in SUBCOMMAND_MODULES:
            module = utils.import_versioned_module(
                package, versions[package], submodule)
            self._find_actions(subparsers, module)
        self._find_actions(subparsers, self)

        return parser

    def _find_actions(self, subparsers, actions_module):
        for attr in (a for a in dir(actions_module) if a.startswith('do_')):
            # I prefer to be hypen-separated instead of underscores.
            command = attr[3:].replace('_', '-')
            callback = getattr(actions_module, attr)
            desc = callback.__doc__ or ''
            help = desc.strip().split('\n')[0]
            arguments = getattr(callback, 'arguments', [])

            subparser = subparsers.add_parser(command, help=help,
                                              description=desc,
                                              add_help=False,
                                              formatter_class=HelpFormatter)
            subparser.add_argument('-h', '--help', action='help',
                                   help=argparse.SUPPRESS)
            self.subcommands[command] = subparser
            for (args, kwargs) in arguments:
                subparser.add_argument(*args, **kwargs)
            subparser.set_defaults(func=callback)

    def _setup_logging(self, debug):
        # Output the logs to command-line interface
        color_handler = handlers.ColorHandler(sys.stdout)
        logger_root = logging.getLogger(None).logger
        logger_root.level = logging.DEBUG if debug else logging.WARNING
        logger_root.addHandler(color_handler)

        # Set the logger level of special library
        logging.getLogger('iso8601') \
            .logger.setLevel(logging.WARNING)
        logging.getLogger('urllib3.connectionpool') \
            .logger.setLevel(logging.WARNING)

    def main(self, argv):
        # Parse args once to find version
        parser = self.get_base_parser()
        (options, args) = parser.parse_known_args(argv)
        self.debug = options.debug
        self._setup_logging(options.debug)

        subcommand_parser = self.get_subcommand_parser(options)
        self.parser = subcommand_parser

        # Handle top-level --help/-h before attempting to parse
        # a command off the command line.
        if (not args and options.help) or not argv:
            self.do_help(options)
            return 0

        # Parse args again and call whatever callback was selected.
        args = subcommand_parser.parse_args(argv)

        # Short-circuit and deal with help command right away.
        if args.func == self.do_help:
            self.do_help(args)
            return 0
        elif args.func == self.do_bash_completion:
            self.do_bash_completion(args)
            return 0

        if not args.os_auth_token:
            raise exc.CommandError(_("You must provide a token via"
                                     " either --os-auth-token or"
                                     " env[OS_AUTH_TOKEN]"))

        args.func(ClientManager(args), args)
        return 0

    def do_bash_completion(self, args):
        """Prints all of the commands and options to stdout."""
        commands = set()
        options = set()
        for sc_str, sc in self.subcommands.items():
            commands.add(sc_str)
            for option in list(sc._optionals._option_string_actions):
                options.add(option)
        options.update(self.parser._optionals._option_string_actions)

        commands.remove('bash-completion')
        print(' '.join(commands | options))

    @utils.arg('command', metavar='<subcommand>', nargs='?',
               help='Display help for <subcommand>')
    def do_help(self, args):
        """Display help about this program or one of its subcommands."""
        if getattr(args, 'command', None):
            if args.command in self.subcommands:
                self.subcommands[args.command].print_help()
            else:
                msg = "'%s' is not a valid subcommand"
                raise exc.CommandError(msg % args.command)
        else:
            self.parser.print_help()


class HelpFormatter(argparse.HelpFormatter):
    def start_section(self, heading):
        # Title-case the headings
        heading = '%s%s' % (heading[0].upper(), heading[1:])
        super(HelpFormatter, self).start_section(heading)


def main(args=None):
    if args is None:
        args = sys.argv[1:]
    shell = StackShell()
    try:
        shell.main(args)

    except KeyboardInterrupt:
        utils.exit('... terminating stackclient')
    except Exception as e:
        if shell.debug:
            raise
        else:
            logger.debug("Command failed", exc_info=True)
            utils.exit(str(e))


if __name__ == "__main__":
    main()
