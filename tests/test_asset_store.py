"""S3-backed asset store, exercised through botocore's Stubber."""

from __future__ import annotations

from datetime import datetime, timezone

import boto3
import pytest
from botocore.stub import Stubber

from wavepub.services.asset_store import NotFound, S3AssetStore, StoreError, UploadFailure

BUCKET = "waveform-test"
MODIFIED = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def s3_client():
    return boto3.client(
        "s3",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )


@pytest.fixture
def stubbed(s3_client):
    with Stubber(s3_client) as stubber:
        yield S3AssetStore(s3_client, BUCKET), stubber
        stubber.assert_no_pending_responses()


def _listing(*keys):
    return {
        "IsTruncated": False,
        "Contents": [
            {"Key": key, "Size": 2048, "LastModified": MODIFIED}
            for key in keys
        ],
    }


def test_get_returns_video_descriptor(stubbed):
    store, stubber = stubbed
    stubber.add_response(
        "list_objects_v2",
        _listing("audio-waveform-videos/song.mp4"),
        {"Bucket": BUCKET, "Prefix": "audio-waveform-videos/song."},
    )

    resource = store.get("audio-waveform-videos/song")

    assert resource.public_id == "audio-waveform-videos/song"
    assert resource.secure_url == f"https://{BUCKET}.s3.amazonaws.com/audio-waveform-videos/song.mp4"
    assert resource.format == "mp4"
    assert resource.resource_type == "video"
    assert resource.folder == "audio-waveform-videos"
    assert resource.bytes == 2048


def test_get_ignores_non_video_assets(stubbed):
    store, stubber = stubbed
    stubber.add_response(
        "list_objects_v2",
        _listing("audio-waveform-videos/song.mp3", "audio-waveform-videos/song.png"),
        {"Bucket": BUCKET, "Prefix": "audio-waveform-videos/song."},
    )

    with pytest.raises(NotFound):
        store.get("audio-waveform-videos/song")


def test_get_does_not_match_longer_ids(stubbed):
    store, stubber = stubbed
    stubber.add_response(
        "list_objects_v2",
        _listing("song.remix.mp4"),
        {"Bucket": BUCKET, "Prefix": "song."},
    )

    with pytest.raises(NotFound):
        store.get("song")


def test_list_filters_to_videos_under_prefix(stubbed):
    store, stubber = stubbed
    stubber.add_response(
        "list_objects_v2",
        _listing(
            "audio-waveform-videos/a.mp4",
            "audio-waveform-videos/b.mp3",
            "audio-waveform-videos/c.webm",
        ),
        {"Bucket": BUCKET, "Prefix": "audio-waveform-videos/"},
    )

    resources = store.list("audio-waveform-videos/")

    assert {resource.public_id for resource in resources} == {
        "audio-waveform-videos/a",
        "audio-waveform-videos/c",
    }


def test_list_of_empty_folder(stubbed):
    store, stubber = stubbed
    stubber.add_response(
        "list_objects_v2",
        {"IsTruncated": False, "KeyCount": 0},
        {"Bucket": BUCKET, "Prefix": "fresh-folder/"},
    )

    assert store.list("fresh-folder/") == []


def test_list_translates_client_errors(stubbed):
    store, stubber = stubbed
    stubber.add_client_error(
        "list_objects_v2",
        service_error_code="NoSuchBucket",
        service_message="The specified bucket does not exist",
        http_status_code=404,
    )

    with pytest.raises(StoreError, match="NoSuchBucket"):
        store.list("audio-waveform-videos/")


def test_delete_reports_per_id_status(stubbed):
    store, stubber = stubbed
    stubber.add_response(
        "list_objects_v2",
        _listing("audio-waveform-videos/song.mp4"),
        {"Bucket": BUCKET, "Prefix": "audio-waveform-videos/song."},
    )
    stubber.add_response(
        "list_objects_v2",
        {"IsTruncated": False},
        {"Bucket": BUCKET, "Prefix": "audio-waveform-videos/gone."},
    )
    stubber.add_response(
        "delete_objects",
        {},
        {
            "Bucket": BUCKET,
            "Delete": {"Objects": [{"Key": "audio-waveform-videos/song.mp4"}], "Quiet": True},
        },
    )

    result = store.delete(["audio-waveform-videos/song", "audio-waveform-videos/gone"])

    assert result.deleted == {
        "audio-waveform-videos/song": "deleted",
        "audio-waveform-videos/gone": "not_found",
    }


def test_delete_of_missing_id_skips_delete_call(stubbed):
    store, stubber = stubbed
    stubber.add_response(
        "list_objects_v2",
        {"IsTruncated": False},
        {"Bucket": BUCKET, "Prefix": "nothing."},
    )

    assert store.delete(["nothing"]).deleted == {"nothing": "not_found"}


class RecordingClient:
    def __init__(self, error=None):
        self.calls = []
        self.error = error

    def upload_file(self, filename, bucket, key, ExtraArgs=None):
        self.calls.append((filename, bucket, key, ExtraArgs))
        if self.error is not None:
            raise self.error


def test_upload_puts_video_under_public_id(tmp_path):
    video = tmp_path / "song-1234.mp4"
    video.write_bytes(b"video-bytes")
    client = RecordingClient()
    store = S3AssetStore(client, BUCKET, region="eu-west-1")

    resource = store.upload(video, "audio-waveform-videos/song")

    assert client.calls == [
        (
            str(video),
            BUCKET,
            "audio-waveform-videos/song.mp4",
            {"ContentType": "video/mp4", "Metadata": {"resource-type": "video"}},
        )
    ]
    assert resource.public_id == "audio-waveform-videos/song"
    assert resource.secure_url == f"https://{BUCKET}.s3.eu-west-1.amazonaws.com/audio-waveform-videos/song.mp4"
    assert resource.bytes == len(b"video-bytes")


def test_upload_rejects_transformations(tmp_path):
    video = tmp_path / "song.mp4"
    video.write_bytes(b"video")
    store = S3AssetStore(RecordingClient(), BUCKET)

    with pytest.raises(UploadFailure, match="transformations"):
        store.upload(video, "song", transformation=[{"flags": "layer_apply"}])


def test_upload_rejects_non_video_files(tmp_path):
    audio = tmp_path / "song.mp3"
    audio.write_bytes(b"audio")

    with pytest.raises(UploadFailure):
        S3AssetStore(RecordingClient(), BUCKET).upload(audio, "song")


def test_upload_translates_client_errors(tmp_path):
    from botocore.exceptions import ClientError

    video = tmp_path / "song.mp4"
    video.write_bytes(b"video")
    error = ClientError({"Error": {"Code": "AccessDenied", "Message": "denied"}}, "PutObject")
    store = S3AssetStore(RecordingClient(error=error), BUCKET)

    with pytest.raises(UploadFailure, match="AccessDenied"):
        store.upload(video, "song")


@pytest.mark.parametrize(
    ("kwargs", "expected"),
    [
        ({}, f"https://{BUCKET}.s3.amazonaws.com/a%20b/song.mp4"),
        ({"region": "eu-west-1"}, f"https://{BUCKET}.s3.eu-west-1.amazonaws.com/a%20b/song.mp4"),
        ({"endpoint_url": "http://minio:9000/"}, f"http://minio:9000/{BUCKET}/a%20b/song.mp4"),
        ({"public_base_url": "https://cdn.example.com"}, "https://cdn.example.com/a%20b/song.mp4"),
    ],
)
def test_object_url_variants(kwargs, expected):
    assert S3AssetStore(RecordingClient(), BUCKET, **kwargs).object_url("a b/song.mp4") == expected
