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

import collections
import enum
import urllib.parse

from oslo_log import log as logging

from stackclient.common import base
from stackclient.common import exceptions as exc
from stackclient.common import headers as hdr
from stackclient.common import http

LOG = logging.getLogger(__name__)

IMAGE_META_PREFIX = 'x-image-meta-'
PURGE_PROPS_HEADER = 'x-glance-registry-purge-props'
LIST_FILTERS = ('name', 'status', 'container_format', 'disk_format',
                'size_min', 'size_max', 'sort_key', 'sort_dir', 'limit',
                'marker')


class ImageField(enum.Enum):
    """Image metadata keys as carried in ``x-image-meta-*`` headers."""

    ID = 'id'
    NAME = 'name'
    CHECKSUM = 'checksum'
    MIN_DISK = 'min-disk'
    MIN_RAM = 'min-ram'
    IS_PUBLIC = 'is-public'
    CREATED_AT = 'created-at'
    UPDATED_AT = 'updated-at'
    OWNER = 'owner'
    LOCATION = 'location'
    STATUS = 'status'
    CONTAINER_FORMAT = 'container-format'
    DISK_FORMAT = 'disk-format'
    DELETED_AT = 'deleted-at'
    SIZE = 'size'
    PROTECTED = 'protected'
    COPY_FROM = 'copy-from'
    STORE = 'store'
    PROPERTY = 'property-'

    def as_header(self):
        return IMAGE_META_PREFIX + self.value

    @classmethod
    def from_attr(cls, attr):
        """Look up a field by its keyword name, e.g. ``min_disk``."""
        try:
            return cls[attr.upper()]
        except KeyError:
            raise TypeError("Unknown image field '%s'" % attr)


PROPERTY_PREFIX = ImageField.PROPERTY.as_header()


class Status(hdr.WireEnum):
    QUEUED = 'queued'
    SAVING = 'saving'
    ACTIVE = 'active'
    KILLED = 'killed'
    PENDING_DELETE = 'pending_delete'
    DELETED = 'deleted'


class ContainerFormat(hdr.WireEnum):
    AMI = 'ami'
    ARI = 'ari'
    AKI = 'aki'
    BARE = 'bare'
    OVF = 'ovf'
    OVA = 'ova'
    DOCKER = 'docker'


class DiskFormat(hdr.WireEnum):
    RAW = 'raw'
    VHD = 'vhd'
    VHDX = 'vhdx'
    VMDK = 'vmdk'
    VDI = 'vdi'
    ISO = 'iso'
    PLOOP = 'ploop'
    QCOW2 = 'qcow2'
    AKI = 'aki'
    ARI = 'ari'
    AMI = 'ami'


_ImageDetails = collections.namedtuple('ImageDetails', [
    'id', 'name', 'checksum', 'min_disk', 'min_ram', 'is_public',
    'created_at', 'updated_at', 'owner', 'location', 'status',
    'container_format', 'disk_format', 'deleted_at', 'size', 'properties'])


class ImageDetails(_ImageDetails, hdr.Record):
    """Full metadata of one image, as returned by ``HEAD /v1/images/{id}``.

    Optional fields are ``None`` when the server did not send them;
    ``properties`` is a read-only mapping of the free-form image properties.
    """

    __slots__ = ()

    def __new__(cls, id, name, checksum, min_disk, min_ram, is_public,
                created_at, updated_at, owner, location, status,
                container_format=None, disk_format=None, deleted_at=None,
                size=None, properties=None):
        return super(ImageDetails, cls).__new__(
            cls, id, name, checksum, min_disk, min_ram, is_public,
            created_at, updated_at, owner, location, status,
            container_format, disk_format, deleted_at, size,
            hdr.readonly(properties))


class ImageDetailsParser(hdr.HeaderMetadataParser):
    """Parses :class:`ImageDetails` from Glance v1 image headers.

    There may be any number of headers beginning with
    ``x-image-meta-property-``; they are the free-form key/value pairs
    saved with the image metadata.
    """

    field_prefix = IMAGE_META_PREFIX
    property_prefix = PROPERTY_PREFIX
    record_class = ImageDetails
    fields = (
        hdr.HeaderField(ImageField.ID.value),
        hdr.HeaderField(ImageField.NAME.value),
        hdr.HeaderField(ImageField.CHECKSUM.value),
        hdr.HeaderField(ImageField.MIN_DISK.value, hdr.INTEGER),
        hdr.HeaderField(ImageField.MIN_RAM.value, hdr.INTEGER),
        hdr.HeaderField(ImageField.IS_PUBLIC.value, hdr.BOOLEAN),
        hdr.HeaderField(ImageField.CREATED_AT.value, hdr.TIMESTAMP),
        hdr.HeaderField(ImageField.UPDATED_AT.value, hdr.TIMESTAMP),
        hdr.HeaderField(ImageField.OWNER.value),
        hdr.HeaderField(ImageField.LOCATION.value),
        hdr.HeaderField(ImageField.STATUS.value, hdr.ENUM, enum=Status),
        hdr.HeaderField(ImageField.CONTAINER_FORMAT.value, hdr.ENUM,
                        required=False, enum=ContainerFormat),
        hdr.HeaderField(ImageField.DISK_FORMAT.value, hdr.ENUM,
                        required=False, enum=DiskFormat),
        hdr.HeaderField(ImageField.DELETED_AT.value, hdr.TIMESTAMP,
                        required=False),
        hdr.HeaderField(ImageField.SIZE.value, hdr.INTEGER, required=False),
    )


def image_meta_to_headers(properties=None, **fields):
    """Bind image metadata keyword arguments to ``x-image-meta-*`` headers.

    :param properties: free-form properties, sent as
                       ``x-image-meta-property-<key>``
    :param fields: image fields by keyword name (``min_disk=1``); ``None``
                   values are skipped
    :raises TypeError: for a keyword that is not an image field
    """
    headers = {}
    for attr, value in fields.items():
        field = ImageField.from_attr(attr)
        if field is ImageField.PROPERTY:
            raise TypeError("Use 'properties' to set image properties")
        if value is None:
            continue
        headers[field.as_header()] = hdr.encode_value(value)
    headers.update(hdr.properties_to_headers(properties, PROPERTY_PREFIX))
    return headers


class Image(base.Resource):
    def __repr__(self):
        return "<Image %s>" % self._info

    def data(self, **kwargs):
        return self.manager.data(self, **kwargs)

    def delete(self):
        return self.manager.delete(self)


class ImageManager(base.ManagerWithFind):
    resource_class = Image

    def __init__(self, api, date_parser=None):
        super(ImageManager, self).__init__(api)
        self.parser = ImageDetailsParser(date_parser=date_parser)

    def _build_query(self, kwargs):
        params = {}
        for key, value in kwargs.items():
            if key not in LIST_FILTERS:
                raise TypeError("Unsupported image filter '%s'" % key)
            if value is not None:
                params[key] = str(value)
        if not params:
            return ''
        return '?' + urllib.parse.urlencode(sorted(params.items()))

    def list(self, **kwargs):
        """Get a list of images with summary attributes.

        :param name: only images with this name
        :param status: only images with this status
        :param container_format: only images with this container format
        :param disk_format: only images with this disk format
        :param size_min: only images at least this large, in bytes
        :param size_max: only images at most this large, in bytes
        :param sort_key: attribute to sort the list by
        :param sort_dir: 'asc' or 'desc' for ascending or descending sort
        :param limit: maximum number of images to return
        :param marker: begin returning images that appear later in the
                       image list than that represented by this image id
        """
        url = '/v1/images' + self._build_query(kwargs)
        return self._list(url, response_key='images')

    def list_detailed(self, **kwargs):
        """Get a list of images with all attributes.

        Takes the same filters as :meth:`list`.
        """
        url = '/v1/images/detail' + self._build_query(kwargs)
        return self._list(url, response_key='images')

    def get(self, image):
        """Get the full metadata of an image.

        :returns: an :class:`ImageDetails`, or None if the image does not
                  exist
        """
        url = '/v1/images/{id}'.format(id=base.getid(image))
        try:
            headers = self._head(url)
        except exc.HTTPNotFound:
            LOG.debug("Image %s not found", base.getid(image))
            return None
        return self.parser.parse(headers)

    def data(self, image, chunk_size=http.CHUNKSIZE):
        """Get the raw image data as an iterator of chunks.

        :returns: an iterator of bytes, or None if the image does not exist
        """
        url = '/v1/images/{id}'.format(id=base.getid(image))
        try:
            resp = self.api.raw_request(url, 'GET', stream=True, log=False)
        except exc.HTTPNotFound:
            return None
        return resp.iter_content(chunk_size=chunk_size)

    def create(self, name, data, **kwargs):
        """Create an image and upload its data in one request."""
        return self._send('/v1/images', 'POST', data=data, name=name,
                          **kwargs)

    def reserve(self, name, **kwargs):
        """Register image metadata without uploading any data."""
        return self._send('/v1/images', 'POST', name=name, **kwargs)

    def update(self, image, purge_props=False, **kwargs):
        """Update image metadata.

        :param purge_props: replace the stored properties with the given
                            ones instead of merging them
        """
        url = '/v1/images/{id}'.format(id=base.getid(image))
        return self._send(url, 'PUT', purge_props=purge_props, **kwargs)

    def upload(self, image, data, **kwargs):
        """Upload data to an image reserved with :meth:`reserve`."""
        url = '/v1/images/{id}'.format(id=base.getid(image))
        return self._send(url, 'PUT', data=data, **kwargs)

    def delete(self, image):
        """Delete an image.

        :returns: True if deleted, False if the image does not exist
        """
        url = '/v1/images/{id}'.format(id=base.getid(image))
        try:
            self._delete(url)
        except exc.HTTPNotFound:
            LOG.debug("Image %s not found, nothing to delete",
                      base.getid(image))
            return False
        return True

    def _send(self, url, method, data=None, purge_props=False, **kwargs):
        headers = image_meta_to_headers(**kwargs)
        if purge_props:
            headers[PURGE_PROPS_HEADER] = 'true'
        request_kwargs = {'headers': headers}
        if data is not None:
            request_kwargs['data'] = data
        resp = self.api.raw_request(url, method, **request_kwargs)
        body = resp.json() if resp.content else {}
        info = body.get('image')
        if info:
            return Image(self, info, loaded=True)
