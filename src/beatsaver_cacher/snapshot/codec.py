"""Protobuf wire format of the snapshot.

The schema is assembled at import time from a ``FileDescriptorProto`` so no
generated ``_pb2`` module has to be kept in sync. Equivalent ``.proto``::

    syntax = "proto2";
    package mapdata;

    message RankedValue { required bool is_ranked = 1; required float stars = 2; }
    message Ranked {
      required RankedValue score_saber = 1;
      required RankedValue beat_leader = 2;
    }
    message Difficulty {
      required float njs = 1;
      required uint32 notes = 2;
      required string characteristic_name = 3;
      required string difficulty_name = 4;
      required uint32 mods = 5;
      required string environment_name = 6;
      required Ranked ranked = 7;
    }
    message Votes { required uint32 up = 1; required uint32 down = 2; }
    message MapMetadata {
      required uint32 key = 1;
      required string hash = 2;
      required string song_name = 3;
      required string song_sub_name = 4;
      required string song_author_name = 5;
      required string level_author_name = 6;
      required uint32 duration = 7;
      required uint32 uploaded = 8;
      required uint32 last_updated = 9;
      required uint32 mods = 10;
      optional string curator_name = 11;
      required Votes votes = 12;
      repeated Difficulty difficulties = 13;
    }
    message MapList { map<string, MapMetadata> map_metadata = 1; }
"""

from typing import Optional

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory
from google.protobuf.message import DecodeError, EncodeError, Message

from ..errors import SnapshotError
from ..models.records import (
    DifficultyRecord,
    MapRecord,
    Ranked,
    RankedValue,
    Snapshot,
    Votes,
)

PACKAGE = "mapdata"

_Field = descriptor_pb2.FieldDescriptorProto


def _add_field(
    message: descriptor_pb2.DescriptorProto,
    name: str,
    number: int,
    field_type: int,
    label: int = _Field.LABEL_REQUIRED,
    type_name: Optional[str] = None,
) -> None:
    field = message.field.add(name=name, number=number, type=field_type, label=label)
    if type_name is not None:
        field.type_name = f".{PACKAGE}.{type_name}"


def build_file_descriptor() -> descriptor_pb2.FileDescriptorProto:
    """Describe the snapshot schema."""
    file_proto = descriptor_pb2.FileDescriptorProto(
        name="beatsaver_cacher/mapdata.proto",
        package=PACKAGE,
        syntax="proto2",
    )

    ranked_value = file_proto.message_type.add(name="RankedValue")
    _add_field(ranked_value, "is_ranked", 1, _Field.TYPE_BOOL)
    _add_field(ranked_value, "stars", 2, _Field.TYPE_FLOAT)

    ranked = file_proto.message_type.add(name="Ranked")
    _add_field(ranked, "score_saber", 1, _Field.TYPE_MESSAGE, type_name="RankedValue")
    _add_field(ranked, "beat_leader", 2, _Field.TYPE_MESSAGE, type_name="RankedValue")

    difficulty = file_proto.message_type.add(name="Difficulty")
    _add_field(difficulty, "njs", 1, _Field.TYPE_FLOAT)
    _add_field(difficulty, "notes", 2, _Field.TYPE_UINT32)
    _add_field(difficulty, "characteristic_name", 3, _Field.TYPE_STRING)
    _add_field(difficulty, "difficulty_name", 4, _Field.TYPE_STRING)
    _add_field(difficulty, "mods", 5, _Field.TYPE_UINT32)
    _add_field(difficulty, "environment_name", 6, _Field.TYPE_STRING)
    _add_field(difficulty, "ranked", 7, _Field.TYPE_MESSAGE, type_name="Ranked")

    votes = file_proto.message_type.add(name="Votes")
    _add_field(votes, "up", 1, _Field.TYPE_UINT32)
    _add_field(votes, "down", 2, _Field.TYPE_UINT32)

    metadata = file_proto.message_type.add(name="MapMetadata")
    _add_field(metadata, "key", 1, _Field.TYPE_UINT32)
    _add_field(metadata, "hash", 2, _Field.TYPE_STRING)
    _add_field(metadata, "song_name", 3, _Field.TYPE_STRING)
    _add_field(metadata, "song_sub_name", 4, _Field.TYPE_STRING)
    _add_field(metadata, "song_author_name", 5, _Field.TYPE_STRING)
    _add_field(metadata, "level_author_name", 6, _Field.TYPE_STRING)
    _add_field(metadata, "duration", 7, _Field.TYPE_UINT32)
    _add_field(metadata, "uploaded", 8, _Field.TYPE_UINT32)
    _add_field(metadata, "last_updated", 9, _Field.TYPE_UINT32)
    _add_field(metadata, "mods", 10, _Field.TYPE_UINT32)
    _add_field(metadata, "curator_name", 11, _Field.TYPE_STRING, label=_Field.LABEL_OPTIONAL)
    _add_field(metadata, "votes", 12, _Field.TYPE_MESSAGE, type_name="Votes")
    _add_field(
        metadata, "difficulties", 13, _Field.TYPE_MESSAGE,
        label=_Field.LABEL_REPEATED, type_name="Difficulty",
    )

    map_list = file_proto.message_type.add(name="MapList")
    entry = map_list.nested_type.add(name="MapMetadataEntry")
    entry.options.map_entry = True
    _add_field(entry, "key", 1, _Field.TYPE_STRING, label=_Field.LABEL_OPTIONAL)
    _add_field(
        entry, "value", 2, _Field.TYPE_MESSAGE,
        label=_Field.LABEL_OPTIONAL, type_name="MapMetadata",
    )
    _add_field(
        map_list, "map_metadata", 1, _Field.TYPE_MESSAGE,
        label=_Field.LABEL_REPEATED, type_name="MapList.MapMetadataEntry",
    )

    return file_proto


_POOL = descriptor_pool.DescriptorPool()
_POOL.AddSerializedFile(build_file_descriptor().SerializeToString())


def _message_class(name: str):
    return message_factory.GetMessageClass(_POOL.FindMessageTypeByName(f"{PACKAGE}.{name}"))


RankedValueMessage = _message_class("RankedValue")
RankedMessage = _message_class("Ranked")
DifficultyMessage = _message_class("Difficulty")
VotesMessage = _message_class("Votes")
MapMetadataMessage = _message_class("MapMetadata")
MapListMessage = _message_class("MapList")


def _ranked_value_to_message(value: RankedValue) -> Message:
    return RankedValueMessage(is_ranked=value.is_ranked, stars=value.stars)


def difficulty_to_message(difficulty: DifficultyRecord) -> Message:
    return DifficultyMessage(
        njs=difficulty.njs,
        notes=difficulty.notes,
        characteristic_name=difficulty.characteristic_name,
        difficulty_name=difficulty.difficulty_name,
        mods=difficulty.mods,
        environment_name=difficulty.environment_name,
        ranked=RankedMessage(
            score_saber=_ranked_value_to_message(difficulty.ranked.score_saber),
            beat_leader=_ranked_value_to_message(difficulty.ranked.beat_leader),
        ),
    )


def record_to_message(record: MapRecord) -> Message:
    message = MapMetadataMessage(
        key=record.key,
        hash=record.hash,
        song_name=record.song_name,
        song_sub_name=record.song_sub_name,
        song_author_name=record.song_author_name,
        level_author_name=record.level_author_name,
        duration=record.duration,
        uploaded=record.uploaded,
        last_updated=record.last_updated,
        mods=record.mods,
        votes=VotesMessage(up=record.votes.up, down=record.votes.down),
        difficulties=[difficulty_to_message(d) for d in record.difficulties],
    )
    if record.curator_name is not None:
        message.curator_name = record.curator_name
    return message


def _ranked_value_from_message(message: Message) -> RankedValue:
    return RankedValue(is_ranked=message.is_ranked, stars=message.stars)


def difficulty_from_message(message: Message) -> DifficultyRecord:
    return DifficultyRecord(
        njs=message.njs,
        notes=message.notes,
        characteristic_name=message.characteristic_name,
        difficulty_name=message.difficulty_name,
        mods=message.mods,
        environment_name=message.environment_name,
        ranked=Ranked(
            score_saber=_ranked_value_from_message(message.ranked.score_saber),
            beat_leader=_ranked_value_from_message(message.ranked.beat_leader),
        ),
    )


def record_from_message(message: Message) -> MapRecord:
    return MapRecord(
        key=message.key,
        hash=message.hash,
        song_name=message.song_name,
        song_sub_name=message.song_sub_name,
        song_author_name=message.song_author_name,
        level_author_name=message.level_author_name,
        duration=message.duration,
        uploaded=message.uploaded,
        last_updated=message.last_updated,
        mods=message.mods,
        curator_name=message.curator_name if message.HasField("curator_name") else None,
        votes=Votes(up=message.votes.up, down=message.votes.down),
        difficulties=[difficulty_from_message(d) for d in message.difficulties],
    )


def snapshot_to_message(snapshot: Snapshot) -> Message:
    message = MapListMessage()
    for map_id, record in snapshot.items():
        message.map_metadata[map_id].CopyFrom(record_to_message(record))
    return message


def encode_record(record: MapRecord) -> bytes:
    """Serialize a single record."""
    try:
        return record_to_message(record).SerializeToString(deterministic=True)
    except (EncodeError, ValueError) as e:
        raise SnapshotError(f"could not serialize record {record.key:x}: {e}") from e


def encode_snapshot(snapshot: Snapshot) -> bytes:
    """Serialize a snapshot with map entries in deterministic order."""
    try:
        return snapshot_to_message(snapshot).SerializeToString(deterministic=True)
    except (EncodeError, ValueError) as e:
        raise SnapshotError(f"could not serialize snapshot: {e}") from e


def decode_snapshot(data: bytes) -> Snapshot:
    """Parse serialized bytes back into records keyed by map id."""
    message = MapListMessage()
    try:
        message.ParseFromString(data)
    except DecodeError as e:
        raise SnapshotError(f"could not decode snapshot: {e}") from e
    return {map_id: record_from_message(value) for map_id, value in message.map_metadata.items()}
