"""
Unit tests for the asset loader
"""

import base64
import os
import tempfile
import unittest

import httpx

from config import TestingConfig
from services.asset_loader import AssetLoader, ImageHandle
from fakes import make_png


class StaticConfig(TestingConfig):
    STATIC_ROOT = None
    LOGO_PATH = '/images/school-logo.png'


class TestImageHandle(unittest.TestCase):

    def test_from_bytes_reads_size(self):
        handle = ImageHandle.from_bytes(make_png((40, 50)))
        self.assertEqual((handle.width, handle.height), (40, 50))
        self.assertTrue(handle.data.startswith(b'\x89PNG'))

    def test_flowable_fits_box(self):
        image = ImageHandle.from_bytes(make_png((400, 500))).flowable(40, 40)
        self.assertLessEqual(image.drawWidth, 40)
        self.assertLessEqual(image.drawHeight, 40)

    def test_undecodable_bytes_raise(self):
        with self.assertRaises(Exception):
            ImageHandle.from_bytes(b'not an image')


class TestAssetLoader(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.static = tempfile.TemporaryDirectory()
        os.makedirs(os.path.join(self.static.name, 'images'))
        with open(os.path.join(self.static.name, 'images', 'school-logo.png'), 'wb') as fh:
            fh.write(make_png())

        class Config(StaticConfig):
            STATIC_ROOT = self.static.name

        self.config = Config

    def tearDown(self):
        self.static.cleanup()

    async def test_logo_from_static_root(self):
        loader = AssetLoader(self.config)
        logo = await loader.load_logo()
        self.assertIsNotNone(logo)
        self.assertEqual(logo.source, '/images/school-logo.png')

    async def test_missing_file_degrades_to_none(self):
        loader = AssetLoader(self.config)
        with self.assertLogs('services.asset_loader', level='WARNING'):
            self.assertIsNone(await loader.load_image('/photos/missing.png'))

    async def test_empty_url_is_none(self):
        self.assertIsNone(await AssetLoader(self.config).load_image(None))
        self.assertIsNone(await AssetLoader(self.config).load_image(''))

    async def test_data_uri(self):
        uri = 'data:image/png;base64,' + base64.b64encode(make_png((8, 8))).decode('ascii')
        handle = await AssetLoader(self.config).load_image(uri)
        self.assertEqual((handle.width, handle.height), (8, 8))

    async def test_http_fetch_and_cache(self):
        calls = []

        def handler(request):
            calls.append(str(request.url))
            return httpx.Response(200, content=make_png((10, 12)))

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            loader = AssetLoader(self.config, client=client)
            first = await loader.load_image('https://cdn.example.com/photo.png')
            second = await loader.load_image('https://cdn.example.com/photo.png')
        self.assertIs(first, second)
        self.assertEqual(len(calls), 1)
        self.assertEqual(first.height, 12)

    async def test_http_error_degrades_to_none(self):
        def handler(request):
            return httpx.Response(404)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            loader = AssetLoader(self.config, client=client)
            with self.assertLogs('services.asset_loader', level='WARNING'):
                self.assertIsNone(await loader.load_image('https://cdn.example.com/missing.png'))

    async def test_corrupt_image_degrades_to_none(self):
        def handler(request):
            return httpx.Response(200, content=b'<html>not found</html>')

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            loader = AssetLoader(self.config, client=client)
            self.assertIsNone(await loader.load_image('https://cdn.example.com/broken.png'))

    async def test_root_relative_paths_use_base_url(self):
        seen = []

        def handler(request):
            seen.append(str(request.url))
            return httpx.Response(200, content=make_png())

        class RemoteConfig(self.config):
            ASSET_BASE_URL = 'https://portal.example.com/'

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            loader = AssetLoader(RemoteConfig, client=client)
            self.assertIsNotNone(await loader.load_logo())
        self.assertEqual(seen, ['https://portal.example.com/images/school-logo.png'])

    async def test_load_many(self):
        loader = AssetLoader(self.config)
        handles = await loader.load_many(['/images/school-logo.png', None, '/nope.png',
                                          '/images/school-logo.png'])
        self.assertEqual(set(handles), {'/images/school-logo.png', '/nope.png'})
        self.assertIsNotNone(handles['/images/school-logo.png'])
        self.assertIsNone(handles['/nope.png'])


if __name__ == '__main__':
    unittest.main()
