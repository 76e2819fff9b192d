import pytest

from app.core.errors import ValidationError
from app.core.upload_storage import MB, UploadKind, UploadStore, read_upload, validate_upload

from tests.conftest import FakeMinio, bearer

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


@pytest.mark.parametrize(
    "kind, content_type, size",
    [
        (UploadKind.PHOTO, "image/png", 1),
        (UploadKind.PHOTO, "IMAGE/JPEG", 5 * MB),
        (UploadKind.PAYMENT_PROOF, "application/pdf", 10 * MB),
    ],
)
def test_accepted_uploads(kind, content_type, size):
    validate_upload(kind, content_type, size)


@pytest.mark.parametrize(
    "kind, content_type, size, message",
    [
        (UploadKind.PHOTO, "application/pdf", 10, "Unsupported file type"),
        (UploadKind.PHOTO, None, 10, "Unsupported file type"),
        (UploadKind.PHOTO, "image/png", 5 * MB + 1, "File too large. Maximum size is 5 MB"),
        (UploadKind.PAYMENT_PROOF, "image/webp", 10 * MB + 1, "File too large. Maximum size is 10 MB"),
        (UploadKind.PAYMENT_PROOF, "application/pdf", 0, "File is empty"),
    ],
)
def test_refused_uploads(kind, content_type, size, message):
    with pytest.raises(ValidationError) as exc:
        validate_upload(kind, content_type, size)
    assert exc.value.message.startswith(message)


async def test_store_creates_bucket_and_presigns():
    minio = FakeMinio()
    store = UploadStore(minio, buckets={UploadKind.PHOTO: "photos", UploadKind.PAYMENT_PROOF: "payments"})

    url = await store.save(UploadKind.PHOTO, PNG, "image/png", "me.PNG", "voter-1")

    assert minio.buckets == {"photos"}
    [(bucket, name)] = minio.objects
    assert bucket == "photos"
    assert name.startswith("photo/voter-1/") and name.endswith(".png")
    assert url == f"https://minio.test/photos/{name}?signed=1"


async def test_store_public_base():
    store = UploadStore(
        FakeMinio(),
        buckets={UploadKind.PHOTO: "photos", UploadKind.PAYMENT_PROOF: "payments"},
        public_base="https://cdn.example.org/",
    )
    url = await store.save(UploadKind.PAYMENT_PROOF, b"%PDF-1.4", "application/pdf", "receipt.pdf", "v")
    assert url.startswith("https://cdn.example.org/payments/payment_proof/v/")


async def test_upload_route(client, minio, make_voter, voter_token):
    voter = await make_voter()

    r = await client.post(
        "/api/aspirant/uploads/photo",
        files={"file": ("me.png", PNG, "image/png")},
        headers=bearer(voter_token(voter)),
    )

    assert r.status_code == 200, r.text
    body = r.json()
    assert body["kind"] == "photo"
    assert body["size"] == len(PNG)
    assert f"/photos/photo/{voter.id}/" in body["url"]
    assert len(minio.objects) == 1


async def test_upload_route_refuses_wrong_type(client, minio, make_voter, voter_token):
    voter = await make_voter()

    r = await client.post(
        "/api/aspirant/uploads/photo",
        files={"file": ("doc.pdf", b"%PDF-1.4", "application/pdf")},
        headers=bearer(voter_token(voter)),
    )

    assert r.status_code == 400
    assert minio.objects == {}


async def test_upload_route_requires_token(client):
    r = await client.post("/api/aspirant/uploads/photo", files={"file": ("me.png", PNG, "image/png")})
    assert r.status_code == 401


async def test_upload_route_unknown_kind(client, make_voter, voter_token):
    voter = await make_voter()
    r = await client.post(
        "/api/aspirant/uploads/cv",
        files={"file": ("cv.pdf", b"%PDF", "application/pdf")},
        headers=bearer(voter_token(voter)),
    )
    assert r.status_code == 400


class _RecordingFile:
    def __init__(self, data, size=None):
        self.data = data
        self.size = size
        self.requested = []

    async def read(self, n=-1):
        self.requested.append(n)
        return self.data if n < 0 else self.data[:n]


async def test_read_is_bounded_by_the_cap():
    f = _RecordingFile(b"x" * (5 * MB + 100))

    with pytest.raises(ValidationError) as exc:
        await read_upload(UploadKind.PHOTO, f)

    assert exc.value.message == "File too large. Maximum size is 5 MB"
    assert f.requested == [5 * MB + 1]


async def test_declared_size_refused_before_reading():
    f = _RecordingFile(b"", size=10 * MB + 1)

    with pytest.raises(ValidationError):
        await read_upload(UploadKind.PAYMENT_PROOF, f)

    assert f.requested == []


async def test_read_within_cap():
    f = _RecordingFile(PNG, size=len(PNG))
    assert await read_upload(UploadKind.PHOTO, f) == PNG


async def test_upload_route_refuses_oversized_photo(client, minio, make_voter, voter_token):
    voter = await make_voter()

    r = await client.post(
        "/api/aspirant/uploads/photo",
        files={"file": ("big.png", PNG + b"\x00" * (5 * MB), "image/png")},
        headers=bearer(voter_token(voter)),
    )

    assert r.status_code == 400
    assert r.json()["error"] == "File too large. Maximum size is 5 MB"
    assert minio.objects == {}
