import io
from types import SimpleNamespace


class FakeUploads:
    """Upload collaborator that records what it was asked to save."""

    def __init__(self):
        self.saved = []

    async def save(self, upload) -> str:
        path = f"/uploads/{upload.filename}"
        self.saved.append(path)
        return path


def make_upload(filename="gate_4.jpg", content=b"\xff\xd8fake-jpeg"):
    return SimpleNamespace(filename=filename, file=io.BytesIO(content))
