import pytest
from boto3.exceptions import S3UploadFailedError
from botocore.exceptions import ClientError

from meetbot.storage import S3Service


class FailingClient:
    def __init__(self, error):
        self.error = error

    def upload_file(self, file_path, bucket, key, ExtraArgs=None):
        raise self.error

    def put_object(self, **kwargs):
        raise self.error


@pytest.fixture
def s3():
    return S3Service(bucket_name="recordings", access_key_id="key", secret_access_key="secret", region="eu-central-1")


@pytest.fixture
def recording(tmp_path):
    path = tmp_path / "rec.webm"
    path.write_bytes(b"webm")
    return path


def test_disabled_without_credentials(monkeypatch):
    for name in ("AWS_S3_BUCKET_NAME", "AWS_ACCESS_KEY_ID", "AWS_SECRET_ACCESS_KEY"):
        monkeypatch.delenv(name, raising=False)

    service = S3Service()

    assert not service.is_enabled()
    assert service.upload_bytes(b"png", "debug/x.png") is None


def test_sanitize_key_part():
    assert S3Service.sanitize_key_part("user@example.com") == "user_example.com"
    assert S3Service.sanitize_key_part("  ") == "unknown"
    assert len(S3Service.sanitize_key_part("a" * 300)) == 100


@pytest.mark.parametrize("error", [
    S3UploadFailedError("Failed to upload: AccessDenied"),
    ClientError({"Error": {"Code": "AccessDenied", "Message": "denied"}}, "PutObject"),
])
def test_failed_file_upload_returns_none(s3, recording, error):
    s3.s3_client = FailingClient(error)

    assert s3.upload_file(str(recording), "recordings/rec.webm") is None


def test_failed_buffer_upload_returns_none(s3):
    s3.s3_client = FailingClient(S3UploadFailedError("Failed to upload: SlowDown"))

    assert s3.upload_bytes(b"png", "debug/x.png") is None
