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

from stackclient.common import http
from stackclient.glance.v1 import images


class Client(object):
    """Client for the Glance v1 image API.

    :param string endpoint: A user-supplied endpoint URL for the image
                            service.
    :param string token: Token for authentication.
    :param integer timeout: Allows customization of the timeout for client
                            http requests. (optional)
    :param date_parser: callable turning header timestamps into datetimes.
                        (optional)
    """

    def __init__(self, *args, **kwargs):
        """Initialize a new client for the Glance v1 API."""
        date_parser = kwargs.pop('date_parser', None)
        kwargs.setdefault('service_type', 'image')
        self.http_client = http._construct_http_client(*args, **kwargs)
        self.images = images.ImageManager(self.http_client,
                                          date_parser=date_parser)
