import io
from unittest import IsolatedAsyncioTestCase

from PIL import Image

from fakes import png_bytes
from services.photo_preview import PhotoPreviewRegistry, is_preview_ref


class TestPhotoPreviewRegistry(IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.registry = PhotoPreviewRegistry()

    async def test_acquire_renders_bounded_png(self):
        ref = await self.registry.acquire("pole.png", png_bytes(size=(800, 400)))

        self.assertTrue(is_preview_ref(ref))
        preview = self.registry.get(ref)
        self.assertEqual(preview.file_name, "pole.png")
        image = Image.open(io.BytesIO(preview.png))
        self.assertEqual(image.format, "PNG")
        self.assertEqual(image.size, (160, 80))

    async def test_release_is_idempotent(self):
        ref = await self.registry.acquire("pole.png", png_bytes())

        self.assertTrue(self.registry.release(ref))
        self.assertFalse(self.registry.release(ref))
        self.assertIsNone(self.registry.get(ref))

    async def test_scoped_preview_is_released(self):
        async with self.registry.scoped("pole.png", png_bytes()) as ref:
            self.assertIn(ref, self.registry)

        self.assertEqual(len(self.registry), 0)

    async def test_invalid_image_raises(self):
        with self.assertRaises(ValueError):
            await self.registry.acquire("pole.png", b"garbage")
        self.assertEqual(len(self.registry), 0)
