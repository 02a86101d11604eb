"""Pytest configuration and fixtures."""

import os
import zipfile
from io import BytesIO
from unittest.mock import MagicMock
from xml.sax.saxutils import escape

import pytest

# Set test environment before importing application code
os.environ["AWS_REGION"] = "us-east-1"
os.environ["AWS_ACCESS_KEY_ID"] = "test"
os.environ["AWS_SECRET_ACCESS_KEY"] = "test"
os.environ["S3_BUCKET_NAME"] = "test-bucket"
os.environ["S3_OUTPUT_PREFIX"] = "videos/"
os.environ["LOG_FORMAT"] = "console"

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-png-data"
JPEG_BYTES = b"\xff\xd8\xff\xe0fake-jpeg-data"

SLIDE_TEMPLATE = (
    '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
    '<p:sld xmlns:a="http://schemas.openxmlformats.org/drawingml/2006/main" '
    'xmlns:r="http://schemas.openxmlformats.org/officeDocument/2006/relationships" '
    'xmlns:p="http://schemas.openxmlformats.org/presentationml/2006/main">'
    "<p:cSld><p:spTree>{shapes}</p:spTree></p:cSld></p:sld>"
)
RELS_TEMPLATE = (
    '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
    '<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">'
    "{relationships}</Relationships>"
)
IMAGE_REL_TYPE = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/image"
LAYOUT_REL_TYPE = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/slideLayout"


def build_slide_xml(texts=(), embed_ids=()) -> str:
    """Build slide XML with one text run per entry and one picture per embed id."""
    shapes = "".join(
        f"<p:sp><p:txBody><a:p><a:r><a:t>{escape(t)}</a:t></a:r></a:p></p:txBody></p:sp>"
        for t in texts
    )
    shapes += "".join(
        f'<p:pic><p:blipFill><a:blip r:embed="{rid}"/></p:blipFill></p:pic>'
        for rid in embed_ids
    )
    return SLIDE_TEMPLATE.format(shapes=shapes)


def build_rels_xml(relationships) -> str:
    """Build a relationship manifest from (id, type, target, external) tuples."""
    entries = ""
    for rid, rel_type, target, external in relationships:
        mode = ' TargetMode="External"' if external else ""
        entries += f'<Relationship Id="{rid}" Type="{rel_type}" Target="{target}"{mode}/>'
    return RELS_TEMPLATE.format(relationships=entries)


def build_pptx(slides: dict, extra_entries: dict | None = None) -> bytes:
    """Build a PPTX-shaped zip archive in memory.

    ``slides`` maps slide number to a dict with optional keys:
        texts: list of text runs
        images: list of (media filename, bytes)
        thumbnail: bytes stored as ppt/thumbnails/thumbnail<N>.jpeg
        raw_xml: slide XML used verbatim
        rels_xml: relationship manifest used verbatim
    """
    buffer = BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        archive.writestr("[Content_Types].xml", "<Types/>")
        for number, slide in slides.items():
            images = slide.get("images", [])
            embed_ids = [f"rId{i + 2}" for i in range(len(images))]

            xml = slide.get("raw_xml") or build_slide_xml(slide.get("texts", []), embed_ids)
            archive.writestr(f"ppt/slides/slide{number}.xml", xml)

            relationships = [("rId1", LAYOUT_REL_TYPE, "../slideLayouts/slideLayout1.xml", False)]
            for rid, (name, content) in zip(embed_ids, images):
                relationships.append((rid, IMAGE_REL_TYPE, f"../media/{name}", False))
                archive.writestr(f"ppt/media/{name}", content)
            archive.writestr(
                f"ppt/slides/_rels/slide{number}.xml.rels",
                slide.get("rels_xml") or build_rels_xml(relationships),
            )

            if "thumbnail" in slide:
                archive.writestr(f"ppt/thumbnails/thumbnail{number}.jpeg", slide["thumbnail"])

        for path, content in (extra_entries or {}).items():
            archive.writestr(path, content)

    return buffer.getvalue()


@pytest.fixture
def pptx_builder():
    """Factory building PPTX-shaped archives."""
    return build_pptx


@pytest.fixture
def sample_pptx():
    """Three-slide deck: text+image, empty, text only."""
    return build_pptx(
        {
            1: {
                "texts": ["Quarterly results", "Revenue grew 20%"],
                "images": [("image1.png", PNG_BYTES)],
                "thumbnail": JPEG_BYTES,
            },
            2: {},
            3: {"texts": ["Next steps"]},
        }
    )


class FakeVideoClient:
    """Scripted VideoGenerationClient.

    ``script`` lists poll outcomes in order: "pending", "fail", "done",
    "empty" (done without media) or "error:<message>". Once the script is
    used up every poll returns "done".
    """

    def __init__(self, script=None, submit_errors=None):
        self.script = list(script or [])
        self.submit_errors = dict(submit_errors or {})
        self.requests = []
        self.poll_count = 0

    async def submit(self, request):
        from deck_video.generation.models import GenerationOperation

        index = len(self.requests)
        self.requests.append(request)
        if index in self.submit_errors:
            raise self.submit_errors[index]
        return GenerationOperation(name=f"op-{index + 1}")

    async def poll(self, operation):
        from deck_video.generation.models import GeneratedVideo, GenerationOperation

        self.poll_count += 1
        outcome = self.script.pop(0) if self.script else "done"

        if outcome == "fail":
            raise ConnectionError("poll request timed out")
        if outcome == "pending":
            return GenerationOperation(name=operation.name)
        if outcome == "empty":
            return GenerationOperation(name=operation.name, done=True)
        if outcome.startswith("error:"):
            return GenerationOperation(name=operation.name, done=True, error=outcome[len("error:"):])
        return GenerationOperation(
            name=operation.name,
            done=True,
            videos=[GeneratedVideo(uri=f"s3://test-bucket/videos/{operation.name}/output.mp4")],
        )


class FakeRecognizer:
    """TextRecognizer returning canned text per raw image bytes."""

    def __init__(self, texts=None, failing=()):
        self.texts = dict(texts or {})
        self.failing = set(failing)
        self.calls = 0

    async def recognize(self, image):
        self.calls += 1
        raw = image.raw_bytes()
        if raw in self.failing:
            raise RuntimeError("recognition service unavailable")
        return self.texts.get(raw, "")


class FakeSleep:
    """Async sleep replacement that records requested delays."""

    def __init__(self):
        self.delays = []

    async def __call__(self, seconds):
        self.delays.append(seconds)


@pytest.fixture
def fake_sleep():
    return FakeSleep()


@pytest.fixture
def fake_video_client():
    return FakeVideoClient()


@pytest.fixture
def make_orchestrator(fake_sleep):
    """Build an orchestrator around a client with no real waiting."""
    from deck_video.generation.orchestrator import GenerationOrchestrator

    def _make(client, max_poll_failures=5):
        return GenerationOrchestrator(
            client,
            model_id="test-video-model",
            poll_interval=0,
            max_poll_failures=max_poll_failures,
            sleep=fake_sleep,
        )

    return _make


@pytest.fixture
def sample_slides():
    """Slide records: 1 without image, 2 and 3 with images."""
    from deck_video.ingestion.models import SlideImage, SlideRecord

    return [
        SlideRecord(slide_number=1, text="Welcome"),
        SlideRecord(
            slide_number=2,
            text="Market overview",
            images=[SlideImage.from_bytes(b"slide-2-image")],
        ),
        SlideRecord(
            slide_number=3,
            text="Roadmap",
            images=[
                SlideImage.from_bytes(b"slide-3-first", "image/jpeg"),
                SlideImage.from_bytes(b"slide-3-second"),
            ],
        ),
    ]


def bedrock_text_response(text: str) -> dict:
    """Shape of a Bedrock invoke_model response for a Claude Messages call."""
    import json

    payload = {"content": [{"type": "text", "text": text}]}
    return {"body": MagicMock(read=MagicMock(return_value=json.dumps(payload).encode()))}


@pytest.fixture
def mock_bedrock_client():
    """Mock Bedrock runtime client."""
    client = MagicMock()
    client.invoke_model.return_value = bedrock_text_response("")
    client.start_async_invoke.return_value = {
        "invocationArn": "arn:aws:bedrock:us-east-1:123456789012:async-invoke/abc123"
    }
    client.get_async_invoke.return_value = {"status": "InProgress"}
    return client


@pytest.fixture
def mock_s3_client():
    """Mock S3 client serving fake video bytes."""
    client = MagicMock()
    client.get_object.side_effect = lambda Bucket, Key: {
        "Body": MagicMock(read=MagicMock(return_value=f"video:{Key}".encode()))
    }
    client.generate_presigned_url.return_value = "https://test-bucket.s3.amazonaws.com/signed"
    return client
