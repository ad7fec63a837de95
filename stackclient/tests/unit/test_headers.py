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

import datetime

from requests import structures
import testtools

from stackclient.common import exceptions as exc
from stackclient.common import headers as hdr
from stackclient.glance.v1 import images
from stackclient.tests.unit import fakes

UTC = datetime.timezone.utc
JAN_1 = datetime.datetime(2014, 1, 1, tzinfo=UTC)
REQUIRED_KEYS = ['id', 'name', 'checksum', 'min-disk', 'min-ram',
                 'created-at', 'updated-at', 'owner', 'location', 'status']


class ImageDetailsParserTest(testtools.TestCase):

    def setUp(self):
        super(ImageDetailsParserTest, self).setUp()
        self.parser = images.ImageDetailsParser()

    def test_parse_required_fields(self):
        image = self.parser.parse(fakes.image_headers())

        self.assertEqual('img-1', image.id)
        self.assertEqual('cirros', image.name)
        self.assertEqual('abc123', image.checksum)
        self.assertEqual(0, image.min_disk)
        self.assertEqual(0, image.min_ram)
        self.assertTrue(image.is_public)
        self.assertEqual(JAN_1, image.created_at)
        self.assertEqual(JAN_1, image.updated_at)
        self.assertEqual('admin', image.owner)
        self.assertEqual('http://x', image.location)
        self.assertEqual(images.Status.ACTIVE, image.status)
        self.assertEqual({}, dict(image.properties))

    def test_optional_fields_absent(self):
        image = self.parser.parse(fakes.image_headers())

        self.assertIsNone(image.container_format)
        self.assertIsNone(image.disk_format)
        self.assertIsNone(image.deleted_at)
        self.assertIsNone(image.size)

    def test_optional_fields_present(self):
        headers = fakes.image_headers(container_format='bare',
                                      disk_format='QCOW2',
                                      deleted_at='2014-02-03T04:05:06Z',
                                      size='13167616')
        image = self.parser.parse(headers)

        self.assertEqual(images.ContainerFormat.BARE, image.container_format)
        self.assertEqual(images.DiskFormat.QCOW2, image.disk_format)
        self.assertEqual(datetime.datetime(2014, 2, 3, 4, 5, 6, tzinfo=UTC),
                         image.deleted_at)
        self.assertEqual(13167616, image.size)

    def test_missing_required_field(self):
        for key in REQUIRED_KEYS:
            headers = fakes.image_headers(**{key.replace('-', '_'): None})
            e = self.assertRaises(exc.MissingField,
                                  self.parser.parse, headers)
            self.assertEqual(key, e.field)

    def test_malformed_integer(self):
        for key in ('min-disk', 'min-ram'):
            headers = fakes.image_headers(**{key.replace('-', '_'): 'abc'})
            e = self.assertRaises(exc.MalformedField,
                                  self.parser.parse, headers)
            self.assertEqual(key, e.field)
            self.assertEqual('abc', e.value)

    def test_trailing_newline_rejected(self):
        for key, value in (('min-disk', '5\n'),
                           ('created-at', '2014-01-01T00:00:00Z\n')):
            headers = fakes.image_headers(**{key.replace('-', '_'): value})
            e = self.assertRaises(exc.MalformedField,
                                  self.parser.parse, headers)
            self.assertEqual(key, e.field)
            self.assertEqual(value, e.value)

    def test_integer_out_of_range(self):
        headers = fakes.image_headers(size=str(2 ** 63))
        e = self.assertRaises(exc.MalformedField, self.parser.parse, headers)
        self.assertEqual('size', e.field)

    def test_negative_integer(self):
        image = self.parser.parse(fakes.image_headers(min_ram='-1'))
        self.assertEqual(-1, image.min_ram)

    def test_is_public_absent_is_false(self):
        image = self.parser.parse(fakes.image_headers(is_public=None))
        self.assertFalse(image.is_public)

    def test_is_public_lenient(self):
        for value, expected in (('TRUE', True), ('True', True),
                                ('false', False), ('yes', False),
                                ('', False)):
            image = self.parser.parse(fakes.image_headers(is_public=value))
            self.assertEqual(expected, image.is_public)

    def test_malformed_timestamp(self):
        headers = fakes.image_headers(created_at='yesterday')
        e = self.assertRaises(exc.MalformedField, self.parser.parse, headers)
        self.assertEqual('created-at', e.field)
        self.assertEqual('yesterday', e.value)

    def test_sub_second_timestamp_rejected(self):
        headers = fakes.image_headers(updated_at='2014-01-01T00:00:00.123Z')
        self.assertRaises(exc.MalformedField, self.parser.parse, headers)

    def test_unknown_status(self):
        headers = fakes.image_headers(status='exploded')
        e = self.assertRaises(exc.UnknownEnumValue,
                              self.parser.parse, headers)
        self.assertIsInstance(e, exc.MalformedField)
        self.assertEqual('status', e.field)
        self.assertEqual('exploded', e.value)
        self.assertIn('active', e.choices)

    def test_present_but_unknown_optional_enum(self):
        headers = fakes.image_headers(disk_format='floppy')
        e = self.assertRaises(exc.UnknownEnumValue,
                              self.parser.parse, headers)
        self.assertEqual('disk-format', e.field)

    def test_present_but_malformed_optional_integer(self):
        headers = fakes.image_headers(size='1.5')
        self.assertRaises(exc.MalformedField, self.parser.parse, headers)

    def test_properties(self):
        headers = fakes.image_headers()
        headers['x-image-meta-property-color'] = 'red'
        headers['x-image-meta-property-Size-Class'] = 'large'
        image = self.parser.parse(headers)

        self.assertEqual({'color': 'red', 'size-class': 'large'},
                         dict(image.properties))

    def test_property_value_untouched(self):
        headers = fakes.image_headers()
        headers['x-image-meta-property-kernel'] = ' Mixed Case '
        image = self.parser.parse(headers)
        self.assertEqual(' Mixed Case ', image.properties['kernel'])

    def test_bare_property_prefix_excluded(self):
        headers = fakes.image_headers()
        headers['x-image-meta-property-'] = 'orphan'
        image = self.parser.parse(headers)
        self.assertEqual({}, dict(image.properties))

    def test_properties_are_read_only(self):
        headers = fakes.image_headers()
        headers['x-image-meta-property-color'] = 'red'
        image = self.parser.parse(headers)

        def change():
            image.properties['color'] = 'blue'

        self.assertRaises(TypeError, change)
        self.assertRaises(AttributeError, setattr, image, 'name', 'other')

    def test_properties_rebuilt_each_call(self):
        headers = fakes.image_headers()
        headers['x-image-meta-property-color'] = 'red'
        first = self.parser.parse(headers)
        second = self.parser.parse(fakes.image_headers())
        self.assertEqual({'color': 'red'}, dict(first.properties))
        self.assertEqual({}, dict(second.properties))

    def test_case_insensitive_header_names(self):
        headers = dict((k.upper(), v)
                       for k, v in fakes.image_headers().items())
        headers['X-Image-Meta-Property-Arch'] = 'x86_64'
        image = self.parser.parse(headers)
        self.assertEqual('img-1', image.id)
        self.assertEqual({'arch': 'x86_64'}, dict(image.properties))

    def test_requests_case_insensitive_dict(self):
        headers = structures.CaseInsensitiveDict(fakes.image_headers())
        image = self.parser.parse(headers)
        self.assertEqual('cirros', image.name)

    def test_first_value_wins(self):
        headers = [(k, v) for k, v in fakes.image_headers().items()]
        headers.append(('x-image-meta-name', 'second'))
        image = self.parser.parse(headers)
        self.assertEqual('cirros', image.name)

    def test_multi_valued_mapping(self):
        headers = fakes.image_headers()
        headers['x-image-meta-name'] = ['first', 'second']
        image = self.parser.parse(headers)
        self.assertEqual('first', image.name)

    def test_injected_date_parser(self):
        calls = []

        def date_parser(text):
            calls.append(text)
            return text

        parser = images.ImageDetailsParser(date_parser=date_parser)
        image = parser(fakes.image_headers(deleted_at='whenever'))

        self.assertEqual('whenever', image.deleted_at)
        self.assertEqual(['2014-01-01T00:00:00Z', '2014-01-01T00:00:00Z',
                          'whenever'], calls)

    def test_round_trip(self):
        headers = fakes.image_headers(container_format='ovf',
                                      disk_format='vmdk',
                                      deleted_at='2015-06-07T08:09:10Z',
                                      size='1024', is_public='false')
        headers['x-image-meta-property-os_distro'] = 'ubuntu'
        image = self.parser.parse(headers)

        encoded = self.parser.to_headers(image)

        self.assertEqual('1024', encoded['x-image-meta-size'])
        self.assertEqual('2015-06-07T08:09:10Z',
                         encoded['x-image-meta-deleted-at'])
        self.assertEqual('ubuntu',
                         encoded['x-image-meta-property-os_distro'])
        self.assertEqual(image, self.parser.parse(encoded))

    def test_to_dict(self):
        headers = fakes.image_headers()
        headers['x-image-meta-property-color'] = 'red'
        info = self.parser.parse(headers).to_dict()
        self.assertEqual('img-1', info['id'])
        self.assertEqual({'color': 'red'}, info['properties'])
        self.assertIsInstance(info['properties'], dict)


class HeaderHelpersTest(testtools.TestCase):

    def test_extract_properties(self):
        headers = {
            'X-Account-Meta-Color': 'red',
            'x-account-meta-': 'ignored',
            'x-account-object-count': '3',
            'content-type': 'text/plain',
        }
        self.assertEqual({'color': 'red'},
                         hdr.extract_properties(headers, 'x-account-meta-'))

    def test_extract_properties_last_wins_on_collision(self):
        headers = [('x-image-meta-property-a', '1'),
                   ('X-Image-Meta-Property-A', '2')]
        self.assertEqual(
            {'a': '2'},
            hdr.extract_properties(headers, images.PROPERTY_PREFIX))

    def test_properties_to_headers(self):
        self.assertEqual(
            {'X-Remove-Account-Meta-a': 'x', 'X-Remove-Account-Meta-b': 'x'},
            hdr.properties_to_headers({'a': '1', 'b': '2'},
                                      'X-Remove-Account-Meta-', value='x'))

    def test_iso8601_seconds_parse(self):
        self.assertEqual(JAN_1, hdr.iso8601_seconds_parse(
            '2014-01-01T00:00:00Z'))
        self.assertEqual(JAN_1, hdr.iso8601_seconds_parse(
            '2014-01-01T02:00:00+02:00'))
        self.assertEqual(JAN_1, hdr.iso8601_seconds_parse(
            '2014-01-01T00:00:00'))

    def test_iso8601_seconds_parse_rejects(self):
        for text in ('2014-01-01', '2014-01-01T00:00:00.5Z', 'now', None,
                     '2014-01-01T00:00:00Z\n'):
            self.assertRaises(ValueError, hdr.iso8601_seconds_parse, text)

    def test_iso8601_seconds_format(self):
        value = datetime.datetime(2014, 1, 1, 2, 0, 0,
                                  tzinfo=datetime.timezone(
                                      datetime.timedelta(hours=2)))
        self.assertEqual('2014-01-01T00:00:00Z',
                         hdr.iso8601_seconds_format(value))

    def test_unknown_kind(self):
        parser = hdr.HeaderMetadataParser()
        field = hdr.HeaderField('odd', kind='complex')
        self.assertRaises(ValueError, parser._decode, field, 'x')
