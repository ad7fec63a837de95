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

from stackclient.common import utils

SERVICES = {
    'image': 'glance',
    'object-store': 'swift',
}


def Client(service_type, version, *args, **kwargs):
    """Return a client for service_type at API version.

    :param service_type: 'image' or 'object-store' (the bare package names
                         'glance' and 'swift' are accepted too)
    :param version: API major version, e.g. '1'
    """
    package = SERVICES.get(service_type, service_type)
    if package not in SERVICES.values():
        raise ValueError("Unknown service type '%s'" % service_type)
    module = utils.import_versioned_module(package, version, 'client')
    client_class = getattr(module, 'Client')
    return client_class(*args, **kwargs)
