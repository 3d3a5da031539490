import os

import pytest

from batchpr.errors import FileReadError, ValidationError
from batchpr.files import MODE_EXECUTABLE, MODE_REGULAR, FileMapping, load_file, parse_file_mapping


def test_bare_path_is_local_and_target() -> None:
    assert parse_file_mapping("a.txt") == FileMapping(local="a.txt", target="a.txt")


def test_local_and_target_split() -> None:
    assert parse_file_mapping("a.txt:sub/b.txt") == FileMapping(local="a.txt", target="sub/b.txt")


def test_extra_separators_are_ignored() -> None:
    assert parse_file_mapping("a.txt:b.txt:c.txt") == FileMapping(local="a.txt", target="b.txt")


@pytest.mark.parametrize("entry", ["", "   ", ":b.txt", "a.txt:"])
def test_malformed_entries_are_rejected(entry: str) -> None:
    with pytest.raises(ValidationError):
        parse_file_mapping(entry)


def test_load_file_reads_content_and_target(in_tmp) -> None:
    (in_tmp / "README.md").write_text("# hello\n", encoding="utf-8")

    loaded = load_file(FileMapping(local="README.md", target="docs/README.md"))

    assert loaded.target == "docs/README.md"
    assert loaded.content == "# hello\n"
    assert loaded.mode == MODE_REGULAR


def test_load_file_keeps_executable_bit(in_tmp) -> None:
    script = in_tmp / "run.sh"
    script.write_text("#!/bin/sh\necho hi\n", encoding="utf-8")
    os.chmod(script, 0o755)

    assert load_file(FileMapping(local="run.sh", target="bin/run.sh")).mode == MODE_EXECUTABLE


def test_missing_file_names_the_local_path(in_tmp) -> None:
    with pytest.raises(FileReadError, match="missing.txt") as excinfo:
        load_file(FileMapping(local="missing.txt", target="x.txt"))
    assert excinfo.value.path == "missing.txt"
    assert excinfo.value.step == "build_tree"


def test_binary_file_is_rejected(in_tmp) -> None:
    (in_tmp / "logo.png").write_bytes(b"\x89PNG\r\n\x1a\n\xff\xfe")

    with pytest.raises(FileReadError, match="UTF-8"):
        load_file(FileMapping(local="logo.png", target="logo.png"))
