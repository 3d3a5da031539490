import pytest

from batchpr.errors import ValidationError
from batchpr.files import FileMapping
from batchpr.spec_parser import ChangeSpec, Destination, build_change_spec, parse_change_spec

CONFIG = """\
commit_message: Update CI
subject: "CI for {{ repo }}"
body: Automated change.
head: feature/ci
owner: acme
files:
  - README.md
  - ci.yml:.github/workflows/ci.yml
destinations:
  - repository: api
    base: main
  - repository: other/web
    base: develop
"""


def test_parse_yaml_config(tmp_path) -> None:
    path = tmp_path / "config.yml"
    path.write_text(CONFIG, encoding="utf-8")

    spec = parse_change_spec(path)

    assert spec == ChangeSpec(
        head="feature/ci",
        commit_message="Update CI",
        subject="CI for {{ repo }}",
        body="Automated change.",
        files=(
            FileMapping(local="README.md", target="README.md"),
            FileMapping(local="ci.yml", target=".github/workflows/ci.yml"),
        ),
        destinations=(
            Destination(repository="api", base="main"),
            Destination(repository="other/web", base="develop"),
        ),
        owner="acme",
    )


def test_parse_markdown_frontmatter(tmp_path) -> None:
    path = tmp_path / "batch.md"
    path.write_text(f"---\n{CONFIG}---\n\n# Notes\n\nWhy we do this.\n", encoding="utf-8")

    spec = parse_change_spec(path)

    assert spec.head == "feature/ci"
    assert len(spec.destinations) == 2


def test_markdown_without_frontmatter_is_rejected(tmp_path) -> None:
    path = tmp_path / "batch.md"
    path.write_text("# just notes\n", encoding="utf-8")

    with pytest.raises(ValidationError, match="frontmatter"):
        parse_change_spec(path)


def test_missing_file(tmp_path) -> None:
    with pytest.raises(ValidationError, match="does not exist"):
        parse_change_spec(tmp_path / "nope.yml")


def test_comma_separated_files_shorthand() -> None:
    spec = build_change_spec({"head": "x", "files": "README.md,main.go:cmd/main.go"})

    assert spec.files == (
        FileMapping(local="README.md", target="README.md"),
        FileMapping(local="main.go", target="cmd/main.go"),
    )


@pytest.mark.parametrize(
    "data",
    [
        {"head": "x", "destinations": {"repository": "a"}},
        {"head": "x", "destinations": ["api"]},
        {"head": "x", "files": {"a": "b"}},
        {"head": ["x"]},
    ],
)
def test_wrong_shapes_are_rejected(data) -> None:
    with pytest.raises(ValidationError):
        build_change_spec(data)


def test_split_repository() -> None:
    assert Destination("acme/api", "main").split_repository(None) == ("acme", "api")
    assert Destination("api", "main").split_repository("acme") == ("acme", "api")
    with pytest.raises(ValidationError):
        Destination("api", "main").split_repository(None)
    with pytest.raises(ValidationError):
        Destination("a/b/c", "main").split_repository("acme")


def test_directory_is_rejected(tmp_path) -> None:
    with pytest.raises(ValidationError, match="Unable to read"):
        parse_change_spec(tmp_path)


def test_non_utf8_file_is_rejected(tmp_path) -> None:
    path = tmp_path / "config.yml"
    path.write_bytes(b"head: \xff\xfe\n")

    with pytest.raises(ValidationError, match="Unable to read"):
        parse_change_spec(path)
