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

import os
import sys
import uuid

from oslo_serialization import jsonutils
from oslo_utils import importutils
import prettytable

from stackclient.common import exceptions


# Decorator for cli-args
def arg(*args, **kwargs):
    def _decorator(func):
        # Because of the semantics of decorator composition if we just append
        # to the options list positional options will appear to be backwards.
        func.__dict__.setdefault('arguments', []).insert(0, (args, kwargs))
        return func
    return _decorator


def json_formatter(js):
    return jsonutils.dumps(js, indent=2, sort_keys=True)


def pretty_choice_list(choices):
    return ', '.join("'%s'" % i for i in choices)


def print_list(objs, fields, field_labels, formatters=None, sortby=0):
    if formatters is None:
        formatters = {}
    pt = prettytable.PrettyTable([f for f in field_labels])
    pt.align = 'l'

    for o in objs:
        row = []
        for field in fields:
            if field in formatters:
                row.append(formatters[field](o))
            else:
                data = getattr(o, field, None)
                row.append('' if data is None else data)
        pt.add_row(row)

    if sortby is not None and field_labels:
        print(pt.get_string(sortby=field_labels[sortby]))
    else:
        print(pt.get_string())


def print_dict(d, formatters=None):
    if formatters is None:
        formatters = {}
    pt = prettytable.PrettyTable(['Property', 'Value'])
    pt.align = 'l'

    for field in d.keys():
        if field in formatters:
            pt.add_row([field, formatters[field](d[field])])
        else:
            value = d[field]
            pt.add_row([field, '' if value is None else str(value)])

    print(pt.get_string(sortby='Property'))


def find_resource(manager, name_or_id):
    """Helper for the _find_* methods."""
    # first try to get entity as uuid
    try:
        uuid.UUID(str(name_or_id))
        resource = manager.get(name_or_id)
        if resource is not None:
            return resource
    except ValueError:
        pass

    # finally try to find entity by name
    try:
        return manager.find(name=name_or_id)
    except exceptions.NotFound:
        msg = "No %s with a name or ID of '%s' exists." % \
              (manager.resource_class.__name__.lower(), name_or_id)
        raise exceptions.CommandError(msg)
    except exceptions.NoUniqueMatch:
        msg = ("Multiple %s matches found for '%s', use an ID to be more"
               " specific." % (manager.resource_class.__name__.lower(),
                               name_or_id))
        raise exceptions.CommandError(msg)


def string_to_bool(arg):
    return arg.strip().lower() in ('t', 'true', 'yes', '1')


def env(*vars, **kwargs):
    """Search for the first defined of possibly many env vars

    Returns the first environment variable defined in vars, or
    returns the default defined in kwargs.
    """
    for v in vars:
        value = os.environ.get(v, None)
        if value:
            return value
    return kwargs.get('default', '')


def import_versioned_module(package, version, submodule=None):
    module = 'stackclient.%s.v%s' % (package, version)
    if submodule:
        module = '.'.join((module, submodule))
    return importutils.import_module(module)


def split_key_value_pairs(pairs):
    """Turn ``['k1=v1', 'k2=v2']`` into a dict.

    :raises CommandError: for an item without '='
    """
    result = {}
    for pair in pairs or []:
        key, sep, value = pair.partition('=')
        if not sep or not key:
            raise exceptions.CommandError(
                "Expected KEY=VALUE, got '%s'" % pair)
        result[key] = value
    return result


def exit(msg=''):
    if msg:
        print(msg, file=sys.stderr)
    sys.exit(1)
