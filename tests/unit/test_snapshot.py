"""Unit tests for snapshot serialization, compression, and persistence."""

import gzip
import tempfile
from pathlib import Path

import pytest

from beatsaver_cacher.errors import SnapshotError
from beatsaver_cacher.models.records import DifficultyRecord, MapRecord, Ranked, RankedValue, Votes
from beatsaver_cacher.snapshot.codec import (
    MapListMessage,
    decode_snapshot,
    encode_snapshot,
    record_to_message,
)
from beatsaver_cacher.snapshot.writer import compress_snapshot, read_snapshot, write_snapshot
from beatsaver_cacher.transformers.records import encode_map
from tests.factories import build_map, diff_payload


def _snapshot(size: int):
    snapshot = {}
    for i in range(size):
        map_id = f"{i + 1:x}"
        diffs = [
            diff_payload(difficulty="Expert", njs=14.0 + i * 0.1, stars=i / 3 if i % 2 else None),
            diff_payload(difficulty="ExpertPlus", chroma=bool(i % 3), blStars=5.55),
        ]
        curator = {"name": f"curator{i}"} if i % 4 == 0 else None
        snapshot[map_id] = encode_map(build_map(map_id, diffs=diffs, curator=curator))
    return snapshot


def _record(**overrides):
    fields = dict(
        key=0xABC,
        hash="deadbeef",
        song_name="Song",
        song_sub_name="",
        song_author_name="Artist",
        level_author_name="Mapper",
        duration=95,
        uploaded=1_700_000_000,
        last_updated=1_700_000_100,
        mods=0b00101,
        votes=Votes(up=1, down=0),
        difficulties=[
            DifficultyRecord(
                njs=16.5,
                notes=300,
                characteristic_name="Standard",
                difficulty_name="Hard",
                mods=0b00101,
                environment_name="NiceEnvironment",
                ranked=Ranked(score_saber=RankedValue(is_ranked=True, stars=2.5)),
            )
        ],
    )
    fields.update(overrides)
    return MapRecord(**fields)


class TestCodec:
    """Protobuf encoding of records."""

    def test_empty_snapshot_encodes_to_nothing(self):
        assert encode_snapshot({}) == b""
        assert decode_snapshot(b"") == {}

    def test_round_trip_record(self):
        record = _record()

        assert decode_snapshot(encode_snapshot({"abc": record})) == {"abc": record}

    def test_absent_curator_differs_from_empty_curator(self):
        absent = _record()
        empty = _record(curator_name="")

        decoded = decode_snapshot(encode_snapshot({"a": absent, "b": empty}))

        assert decoded["a"].curator_name is None
        assert decoded["b"].curator_name == ""
        assert not record_to_message(absent).HasField("curator_name")

    def test_encoding_ignores_insertion_order(self):
        snapshot = _snapshot(10)
        reversed_snapshot = dict(reversed(list(snapshot.items())))

        assert encode_snapshot(snapshot) == encode_snapshot(reversed_snapshot)

    def test_message_layout(self):
        message = MapListMessage()
        message.ParseFromString(encode_snapshot({"abc": _record()}))

        entry = message.map_metadata["abc"]
        assert entry.key == 0xABC
        assert entry.votes.up == 1
        assert entry.difficulties[0].ranked.score_saber.is_ranked is True
        assert entry.difficulties[0].ranked.beat_leader.is_ranked is False

    def test_garbage_is_rejected(self):
        with pytest.raises(SnapshotError):
            decode_snapshot(b"\xff\xff\xff\xff")


class TestWriteSnapshot:
    """Compressed snapshot files."""

    @pytest.mark.parametrize("size", [0, 1, 100])
    def test_round_trip(self, size):
        snapshot = _snapshot(size)

        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "mapData.proto.gz"

            assert write_snapshot(snapshot, path) is True
            restored = read_snapshot(path)

        assert restored.keys() == snapshot.keys()
        for map_id, record in snapshot.items():
            assert restored[map_id] == record

    def test_file_is_gzip_of_serialized_snapshot(self):
        snapshot = _snapshot(3)

        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "snapshot.gz"
            write_snapshot(snapshot, path)
            raw = path.read_bytes()

        assert raw[:2] == b"\x1f\x8b"
        assert gzip.decompress(raw) == encode_snapshot(snapshot)
        assert gzip.decompress(compress_snapshot(snapshot)) == encode_snapshot(snapshot)

    def test_overwrites_existing_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "snapshot.gz"
            path.write_bytes(b"stale contents")

            assert write_snapshot(_snapshot(2), path) is True
            assert len(read_snapshot(path)) == 2

    def test_creates_parent_directories(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "deep" / "nested" / "snapshot.gz"

            assert write_snapshot(_snapshot(1), path) is True
            assert path.exists()

    def test_leaves_no_temporary_files(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            write_snapshot(_snapshot(1), Path(tmpdir) / "snapshot.gz")

            assert [p.name for p in Path(tmpdir).iterdir()] == ["snapshot.gz"]

    def test_filesystem_failure_returns_false(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            # Destination is a directory, so the final rename fails
            path = Path(tmpdir) / "taken"
            path.mkdir()

            assert write_snapshot(_snapshot(1), path) is False
            assert path.is_dir()
            assert [p.name for p in Path(tmpdir).iterdir()] == ["taken"]

    def test_serialization_failure_returns_false(self, monkeypatch):
        def broken(snapshot):
            raise SnapshotError("boom")

        monkeypatch.setattr("beatsaver_cacher.snapshot.writer.encode_snapshot", broken)

        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "snapshot.gz"

            assert write_snapshot(_snapshot(1), path) is False
            assert not path.exists()


class TestReadSnapshot:

    def test_not_gzip(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "plain.bin"
            path.write_bytes(b"definitely not gzip")

            with pytest.raises(SnapshotError):
                read_snapshot(path)

    def test_missing_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with pytest.raises(FileNotFoundError):
                read_snapshot(Path(tmpdir) / "absent.gz")
