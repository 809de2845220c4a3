import struct

import pytest

from shannon_codec.config import CodecConfig, get_codec_config
from shannon_codec.errors import ArtifactIOError, CorruptPayloadError, FormatError, MismatchedIdError
from shannon_codec.workspace import Workspace, WorkspaceIdSource, original_name


@pytest.fixture
def workspace(tmp_path):
	ws = Workspace(tmp_path / "work")
	ws.ensure()
	return ws


def _raw(ws, name, content):
	path = ws.raw_dir / name
	path.write_bytes(content)
	return path


def _parts(ws):
	return [p for p in ws.root.rglob("*.part")]


def test_ensure_creates_layout(workspace):
	for name in ("raw", "dictionary", "encoded", "decoded"):
		assert (workspace.root / name).is_dir()


def test_encode_then_decode_file(workspace):
	content = b"The quick brown fox jumps over the lazy dog. " * 200
	source = _raw(workspace, "fox.txt", content)

	encoded = workspace.encode_file(source)
	assert encoded.table_path.name == f"dict_{encoded.linking_id}_fox.bin"
	assert encoded.encoded_path.name == f"encoded_{encoded.linking_id}_fox.txt"
	assert encoded.table_path.parent == workspace.table_dir
	assert encoded.original_size == len(content)
	assert encoded.encoded_size == encoded.encoded_path.stat().st_size
	assert encoded.encoded_size < len(content)

	decoded = workspace.decode_file(encoded.encoded_path)
	assert decoded.decoded_path == workspace.decoded_dir / "decoded_fox.txt"
	assert decoded.decoded_path.read_bytes() == content
	assert decoded.size == len(content)
	assert _parts(workspace) == []


def test_small_chunks_roundtrip(tmp_path):
	ws = Workspace(config=CodecConfig(name="tiny", chunk_size=3, work_dir=str(tmp_path / "w")))
	ws.ensure()
	content = bytes(range(256)) + b"tail bytes"
	encoded = ws.encode_file(_raw(ws, "chunks.bin", content))
	assert ws.decode_file(encoded.encoded_path).decoded_path.read_bytes() == content


def test_empty_file_roundtrip(workspace):
	encoded = workspace.encode_file(_raw(workspace, "empty.dat", b""))
	assert encoded.encoded_path.read_bytes() == struct.pack("<QHQ", 0, 0, encoded.linking_id)
	decoded = workspace.decode_file(encoded.encoded_path)
	assert decoded.decoded_path.read_bytes() == b""


def test_legacy_workspace_roundtrip(tmp_path):
	ws = Workspace(tmp_path / "legacy", get_codec_config("legacy"))
	ws.ensure()
	encoded = ws.encode_file(_raw(ws, "old.txt", b"legacy artifacts"))
	assert 0 <= encoded.linking_id <= 255
	header = encoded.encoded_path.read_bytes()[:10]
	assert struct.unpack("<QBB", header)[2] == encoded.linking_id
	assert ws.decode_file(encoded.encoded_path).decoded_path.read_bytes() == b"legacy artifacts"


def test_listing_is_sorted_and_filtered(workspace):
	_raw(workspace, "b.txt", b"b")
	_raw(workspace, "a.txt", b"a")
	(workspace.raw_dir / "nested").mkdir()
	assert [p.name for p in workspace.list_raw()] == ["a.txt", "b.txt"]

	workspace.encode_file(workspace.raw_dir / "a.txt")
	(workspace.encoded_dir / "notes.md").write_text("not an artifact")
	(workspace.encoded_dir / "encoded_1_x.txt.part").write_bytes(b"")
	names = [p.name for p in workspace.list_encoded()]
	assert len(names) == 1
	assert names[0].startswith("encoded_") and names[0].endswith("_a.txt")


def test_listing_missing_directory(tmp_path):
	assert Workspace(tmp_path / "nowhere").list_raw() == []


def test_decode_requires_naming_convention(workspace):
	path = workspace.encoded_dir / "random.bin"
	path.write_bytes(b"\x00" * 32)
	with pytest.raises(FormatError):
		workspace.decode_file(path)


def test_decode_missing_table(workspace):
	encoded = workspace.encode_file(_raw(workspace, "gone.txt", b"table will vanish"))
	encoded.table_path.unlink()
	with pytest.raises(ArtifactIOError):
		workspace.decode_file(encoded.encoded_path)
	assert list(workspace.decoded_dir.iterdir()) == []


def test_decode_with_swapped_table_id(workspace):
	encoded = workspace.encode_file(_raw(workspace, "swap.txt", b"swapped"))
	# same name, different id stored inside the table
	data = bytearray(encoded.table_path.read_bytes())
	data[2] ^= 0x01
	encoded.table_path.write_bytes(bytes(data))
	with pytest.raises(MismatchedIdError):
		workspace.decode_file(encoded.encoded_path)


def test_truncated_encoded_file_leaves_no_output(workspace):
	encoded = workspace.encode_file(_raw(workspace, "cut.txt", b"truncate me please " * 50))
	data = encoded.encoded_path.read_bytes()
	encoded.encoded_path.write_bytes(data[:-4])
	with pytest.raises(CorruptPayloadError):
		workspace.decode_file(encoded.encoded_path)
	assert list(workspace.decoded_dir.iterdir()) == []


def test_failed_encode_leaves_no_artifacts(workspace, monkeypatch):
	def explode(*args, **kwargs):
		raise OSError("disk full")

	monkeypatch.setattr(workspace.service, "encode_stream", explode)
	with pytest.raises(ArtifactIOError):
		workspace.encode_file(_raw(workspace, "full.txt", b"no room"))
	assert list(workspace.table_dir.iterdir()) == []
	assert list(workspace.encoded_dir.iterdir()) == []


def test_encode_missing_source(workspace):
	with pytest.raises(ArtifactIOError):
		workspace.encode_file(workspace.raw_dir / "missing.txt")


def test_id_source_skips_ids_in_use(workspace):
	workspace.table_path(5, "data").write_bytes(b"")
	draws = iter([5, 5, 9])
	source = WorkspaceIdSource(workspace, "data", bits=64, draw=lambda: next(draws))
	assert source() == 9


def test_id_source_gives_up(workspace):
	workspace.table_path(1, "data").write_bytes(b"")
	source = WorkspaceIdSource(workspace, "data", bits=8, attempts=3, draw=lambda: 1)
	with pytest.raises(ArtifactIOError):
		source()


def test_original_name():
	assert original_name("encoded_17_report.final.txt") == "report.final.txt"
	with pytest.raises(FormatError):
		original_name("decoded_report.txt")


def test_resolve(workspace, tmp_path):
	assert workspace.resolve("x.txt", workspace.raw_dir) == workspace.raw_dir / "x.txt"
	outside = tmp_path / "outside.txt"
	outside.write_bytes(b"")
	assert workspace.resolve(str(outside), workspace.raw_dir) == outside
