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
from stackclient.glance.v1 import images

CONTAINER_FORMATS = [f.value for f in images.ContainerFormat]
DISK_FORMATS = [f.value for f in images.DiskFormat]


def _print_image(image):
    info = image.to_dict()
    properties = info.pop('properties', {})
    for key, value in sorted(properties.items()):
        info['Property \'%s\'' % key] = value
    utils.print_dict(info)


@utils.arg('--name', metavar='<NAME>',
           help='Filter images to those that have this name.')
@utils.arg('--status', metavar='<STATUS>',
           help='Filter images to those that have this status.')
@utils.arg('--container-format', metavar='<CONTAINER_FORMAT>',
           help='Filter images to those that have this container format. '
                'Acceptable formats: %s.'
                % utils.pretty_choice_list(CONTAINER_FORMATS))
@utils.arg('--disk-format', metavar='<DISK_FORMAT>',
           help='Filter images to those that have this disk format. '
                'Acceptable formats: %s.'
                % utils.pretty_choice_list(DISK_FORMATS))
@utils.arg('--limit', metavar='<LIMIT>', type=int,
           help='Maximum number of images to return.')
@utils.arg('--marker', metavar='<ID>',
           help='Begin returning images that appear later in the list than '
                'the image with this id.')
def do_image_list(sc, args):
    """List images you can access."""
    filters = {
        'name': args.name,
        'status': args.status,
        'container_format': args.container_format,
        'disk_format': args.disk_format,
        'limit': args.limit,
        'marker': args.marker,
    }
    image_list = sc.image.images.list_detailed(**filters)
    field_labels = ['ID', 'Name', 'Disk Format', 'Container Format',
                    'Size', 'Status']
    fields = ['id', 'name', 'disk_format', 'container_format',
              'size', 'status']
    utils.print_list(image_list, fields, field_labels, sortby=None)


@utils.arg('id', metavar='<IMAGE>', help='Name or ID of image to describe.')
def do_image_show(sc, args):
    """Describe a specific image."""
    image = utils.find_resource(sc.image.images, args.id)
    if not isinstance(image, images.ImageDetails):
        image = sc.image.images.get(image.id)
        if image is None:
            raise exceptions.CommandError(
                "Image %s not found" % args.id)
    _print_image(image)


@utils.arg('id', metavar='<IMAGE_ID>', help='ID of image to modify.')
@utils.arg('--name', metavar='<NAME>', help='Name of image.')
@utils.arg('--min-disk', metavar='<DISK_GB>', type=int,
           help='Minimum size of disk needed to boot image, in gigabytes.')
@utils.arg('--min-ram', metavar='<DISK_RAM>', type=int,
           help='Minimum amount of ram needed to boot image, in megabytes.')
@utils.arg('--is-public', metavar='{True,False}', type=utils.string_to_bool,
           help='Make image accessible to the public.')
@utils.arg('--owner', metavar='<TENANT_ID>',
           help='Tenant who should own the image.')
@utils.arg('--container-format', metavar='<CONTAINER_FORMAT>',
           choices=CONTAINER_FORMATS,
           help='Container format of image.')
@utils.arg('--disk-format', metavar='<DISK_FORMAT>', choices=DISK_FORMATS,
           help='Disk format of image.')
@utils.arg('--property', metavar='<key=value>', action='append', default=[],
           help='Arbitrary property to associate with image. '
                'May be used multiple times.')
@utils.arg('--purge-props', action='store_true', default=False,
           help='If this flag is present, delete all image properties '
                'not explicitly set in the update request.')
def do_image_update(sc, args):
    """Update a specific image."""
    fields = {
        'name': args.name,
        'min_disk': args.min_disk,
        'min_ram': args.min_ram,
        'is_public': args.is_public,
        'owner': args.owner,
        'container_format': args.container_format,
        'disk_format': args.disk_format,
    }
    properties = utils.split_key_value_pairs(args.property)
    sc.image.images.update(args.id, purge_props=args.purge_props,
                           properties=properties, **fields)
    image = sc.image.images.get(args.id)
    if image is None:
        raise exceptions.CommandError("Image %s not found" % args.id)
    _print_image(image)


@utils.arg('id', metavar='<IMAGE_ID>', nargs='+',
           help='ID of image(s) to delete.')
def do_image_delete(sc, args):
    """Delete specified image(s)."""
    failure_count = 0
    for image_id in args.id:
        if not sc.image.images.delete(image_id):
            failure_count += 1
            print("No image with an ID of '%s' exists." % image_id)
    if failure_count == len(args.id):
        raise exceptions.CommandError("Unable to delete any of the specified "
                                      "images.")
