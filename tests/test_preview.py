"""
Tests for the preview and download controller
"""

import asyncio
import os
import tempfile
import unittest

from config import TestingConfig
from models.artifact import GeneratedArtifact
from models.errors import GenerationError, PreviewNotReady
from services.preview_service import (
    ERROR, IDLE, LOADING, READY, DocumentPreviewController, ViewResource
)
from fakes import CountingResourceFactory


def artifact(label='1'):
    return GeneratedArtifact('Test', f'Test-{label}.pdf', b'%PDF-1.4 ' + label.encode(), 1)


class TestViewResource(unittest.TestCase):

    def test_resource_lifecycle(self):
        with tempfile.TemporaryDirectory() as directory:
            resource = ViewResource.create(artifact(), directory)
            self.assertTrue(resource.uri.startswith('file://'))
            self.assertTrue(resource.path.exists())
            self.assertEqual(resource.path.read_bytes(), b'%PDF-1.4 1')
            resource.release()
            self.assertTrue(resource.released)
            self.assertFalse(resource.path.exists())
            resource.release()


class TestPreviewController(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.factory = CountingResourceFactory()

    def controller(self, generate):
        return DocumentPreviewController(generate, 'Test.pdf', resource_factory=self.factory,
                                         config=TestingConfig)

    async def test_open_reaches_ready(self):
        result = artifact()

        async def generate():
            return result

        controller = self.controller(generate)
        self.assertEqual(controller.state, IDLE)
        session = await controller.open()
        self.assertEqual(session.state, READY)
        self.assertIs(session.artifact, result)
        self.assertTrue(controller.can_download)
        self.assertEqual(self.factory.live, 1)
        self.assertIs(controller.resource.artifact, result)

    async def test_failure_moves_to_error(self):
        async def generate():
            raise GenerationError('Test', 'layout exploded')

        controller = self.controller(generate)
        with self.assertLogs('services.preview_service', level='ERROR'):
            session = await controller.open()
        self.assertEqual(session.state, ERROR)
        self.assertIsNone(session.artifact)
        self.assertIn('layout exploded', session.error_message)
        self.assertFalse(controller.can_download)
        self.assertEqual(self.factory.live, 0)

    async def test_regenerate_after_error(self):
        attempts = []

        async def generate():
            attempts.append(1)
            if len(attempts) == 1:
                raise GenerationError('Test', 'first try fails')
            return artifact()

        controller = self.controller(generate)
        with self.assertLogs('services.preview_service', level='ERROR'):
            await controller.open()
        session = await controller.regenerate()
        self.assertEqual(session.state, READY)
        self.assertIsNone(session.error_message)

    async def test_regenerate_releases_previous_resource(self):
        async def generate():
            return artifact()

        controller = self.controller(generate)
        await controller.open()
        first = controller.resource
        await controller.regenerate()
        self.assertTrue(first.released)
        self.assertEqual(len(self.factory.created), 2)
        self.assertEqual(self.factory.live, 1)

    async def test_close_releases_resource(self):
        async def generate():
            return artifact()

        controller = self.controller(generate)
        await controller.open()
        session = controller.close()
        self.assertEqual(session.state, IDLE)
        self.assertIsNone(session.artifact)
        self.assertIsNone(controller.resource)
        self.assertEqual(self.factory.live, 0)

    async def test_close_while_loading(self):
        """A generation that finishes after close leaves the dialog idle and creates nothing"""
        gate = asyncio.Event()

        async def generate():
            await gate.wait()
            return artifact()

        controller = self.controller(generate)
        task = asyncio.create_task(controller.open())
        await asyncio.sleep(0)
        self.assertEqual(controller.state, LOADING)
        controller.close()
        gate.set()
        await task
        self.assertEqual(controller.state, IDLE)
        self.assertIsNone(controller.session.artifact)
        self.assertEqual(self.factory.created, [])

    async def test_failure_after_close_is_ignored(self):
        gate = asyncio.Event()

        async def generate():
            await gate.wait()
            raise GenerationError('Test', 'too late')

        controller = self.controller(generate)
        task = asyncio.create_task(controller.open())
        await asyncio.sleep(0)
        controller.close()
        gate.set()
        await task
        self.assertEqual(controller.state, IDLE)
        self.assertIsNone(controller.session.error_message)

    async def test_stale_result_never_overwrites_newer(self):
        gate = asyncio.Event()
        results = [artifact('old'), artifact('new')]
        calls = []

        async def generate():
            calls.append(1)
            if len(calls) == 1:
                await gate.wait()
            return results[len(calls) - 1]

        controller = self.controller(generate)
        first = asyncio.create_task(controller.open())
        await asyncio.sleep(0)
        second = asyncio.create_task(controller.regenerate())
        await asyncio.sleep(0)
        self.assertEqual(controller.state, LOADING)
        gate.set()
        await asyncio.gather(first, second)
        self.assertEqual(controller.state, READY)
        self.assertIs(controller.session.artifact, results[1])
        self.assertEqual(len(self.factory.created), 1)
        self.assertEqual(self.factory.live, 1)

    async def test_generations_are_serialised(self):
        gate = asyncio.Event()
        running = []
        overlaps = []

        async def generate():
            if running:
                overlaps.append(1)
            running.append(1)
            await gate.wait()
            running.pop()
            return artifact()

        controller = self.controller(generate)
        tasks = [asyncio.create_task(controller.open())]
        await asyncio.sleep(0)
        tasks.append(asyncio.create_task(controller.regenerate()))
        tasks.append(asyncio.create_task(controller.regenerate()))
        await asyncio.sleep(0)
        gate.set()
        await asyncio.gather(*tasks)
        self.assertEqual(overlaps, [])
        self.assertEqual(controller.state, READY)
        self.assertEqual(self.factory.live, 1)

    async def test_superseded_request_is_skipped(self):
        gate = asyncio.Event()
        calls = []

        async def generate():
            calls.append(1)
            await gate.wait()
            return artifact(str(len(calls)))

        controller = self.controller(generate)
        tasks = [asyncio.create_task(controller.open())]
        await asyncio.sleep(0)
        tasks.append(asyncio.create_task(controller.regenerate()))
        tasks.append(asyncio.create_task(controller.regenerate()))
        await asyncio.sleep(0)
        gate.set()
        await asyncio.gather(*tasks)
        # The middle request never ran: only the first and the latest reached the generator
        self.assertEqual(len(calls), 2)
        self.assertEqual(controller.session.artifact.filename, 'Test-2.pdf')

    async def test_resource_creation_failure_moves_to_error(self):
        async def generate():
            return artifact()

        def failing_factory(result):
            raise OSError('No space left on device')

        controller = DocumentPreviewController(generate, 'Test.pdf', resource_factory=failing_factory,
                                               config=TestingConfig)
        with self.assertLogs('services.preview_service', level='ERROR'):
            session = await controller.open()
        self.assertEqual(session.state, ERROR)
        self.assertIsNone(session.artifact)
        self.assertIn('No space left on device', session.error_message)
        self.assertIsNone(controller.resource)
        self.assertFalse(controller.can_download)

    async def test_cancelled_open_returns_to_idle(self):
        gate = asyncio.Event()

        async def generate():
            await gate.wait()
            return artifact()

        controller = self.controller(generate)
        task = asyncio.create_task(controller.open())
        await asyncio.sleep(0)
        self.assertEqual(controller.state, LOADING)
        task.cancel()
        with self.assertRaises(asyncio.CancelledError):
            await task
        self.assertEqual(controller.state, IDLE)
        self.assertEqual(self.factory.created, [])
        session = await controller.regenerate()
        self.assertEqual(session.state, READY)

    async def test_zoom_is_clamped(self):
        async def generate():
            return artifact()

        controller = self.controller(generate)
        self.assertEqual(controller.session.zoom_percent, 100)
        for _ in range(10):
            controller.zoom_in()
        self.assertEqual(controller.session.zoom_percent, 200)
        for _ in range(10):
            controller.zoom_out()
        self.assertEqual(controller.session.zoom_percent, 50)
        self.assertEqual(controller.zoom_in(), 75)
        self.assertEqual(controller.state, IDLE)

    async def test_zoom_kept_on_regenerate_and_reset_on_open(self):
        async def generate():
            return artifact()

        controller = self.controller(generate)
        await controller.open()
        controller.zoom_in()
        await controller.regenerate()
        self.assertEqual(controller.session.zoom_percent, 125)
        self.assertEqual(controller.state, READY)
        controller.close()
        await controller.open()
        self.assertEqual(controller.session.zoom_percent, 100)

    async def test_download_requires_ready(self):
        async def generate():
            return artifact()

        controller = self.controller(generate)
        with self.assertRaises(PreviewNotReady):
            controller.download(tempfile.gettempdir())

    async def test_download_saves_and_closes(self):
        async def generate():
            return artifact()

        controller = self.controller(generate)
        await controller.open()
        with tempfile.TemporaryDirectory() as directory:
            path = controller.download(directory)
            self.assertEqual(path.name, 'Test.pdf')
            self.assertTrue(os.path.exists(path))
        self.assertEqual(controller.state, IDLE)
        self.assertEqual(self.factory.live, 0)

    async def test_context_manager_releases_on_exit(self):
        async def generate():
            return artifact()

        async with self.controller(generate) as controller:
            await controller.open()
            self.assertEqual(self.factory.live, 1)
        self.assertEqual(controller.state, IDLE)
        self.assertEqual(self.factory.live, 0)

    async def test_default_factory_uses_temp_files(self):
        with tempfile.TemporaryDirectory() as directory:
            class PreviewConfig(TestingConfig):
                PREVIEW_DIR = directory

            async def generate():
                return artifact()

            controller = DocumentPreviewController(generate, 'Test.pdf', config=PreviewConfig)
            await controller.open()
            path = controller.resource.path
            self.assertEqual(str(path.parent), directory)
            self.assertTrue(path.exists())
            controller.close()
            self.assertFalse(path.exists())


if __name__ == '__main__':
    unittest.main()
