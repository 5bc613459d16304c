"""
Shared fixtures for the document pipeline tests
"""

from datetime import date, datetime, timedelta
from io import BytesIO

from PIL import Image as PILImage

from services.asset_loader import ImageHandle

GENERATED_ON = datetime(2024, 3, 15, 10, 30)


def make_png(size=(40, 50), color=(30, 100, 180)):
    """Small solid PNG"""
    out = BytesIO()
    PILImage.new('RGB', size, color).save(out, format='PNG')
    return out.getvalue()


class FakeAssetLoader:
    """In-memory stand-in for AssetLoader; urls in `failing` load as None"""

    def __init__(self, failing=(), logo=True):
        self.failing = set(failing)
        self.logo = logo
        self.requested = []
        self._image = ImageHandle.from_bytes(make_png(), source='fake')

    async def load_logo(self):
        self.requested.append('logo')
        return self._image if self.logo else None

    async def load_image(self, url):
        self.requested.append(url)
        if not url or url in self.failing:
            return None
        return self._image

    async def load_many(self, urls):
        return {url: await self.load_image(url) for url in dict.fromkeys(urls) if url}


class FakeResource:
    def __init__(self, artifact):
        self.artifact = artifact
        self.released = False
        self.uri = f'memory://{artifact.filename}'

    def release(self):
        self.released = True


class CountingResourceFactory:
    """Resource factory that remembers every handle it hands out"""

    def __init__(self):
        self.created = []

    def __call__(self, artifact):
        resource = FakeResource(artifact)
        self.created.append(resource)
        return resource

    @property
    def live(self):
        return sum(1 for resource in self.created if not resource.released)


def march_attendance(present=20, absent=5, start=date(2024, 3, 1)):
    """Present days first, then absent days, from `start`"""
    records = []
    day = start
    for status in ['Present'] * present + ['Absent'] * absent:
        records.append({'date': day.isoformat(), 'status': status})
        day += timedelta(days=1)
    return records


def class_attendance_dict(students=3, month='2024-03'):
    return {
        'class_name': 'Class 5',
        'section': 'A',
        'month': month,
        'students': [
            {
                'student_id': f'STU-{index}',
                'name': f'Student {index}',
                'father_name': f'Father {index}',
                'attendance': march_attendance(),
            }
            for index in range(1, students + 1)
        ],
    }


def student_entries(ids):
    return [{'student_id': student_id, 'name': f'Name {student_id}', 'father_name': 'Khan',
             'photo_url': f'/photos/{student_id}.png'} for student_id in ids]
