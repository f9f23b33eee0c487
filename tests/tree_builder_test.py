from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from conftest import make_tree
from core.errors import ConfigParseError, PathNotFound, PreviousDescriptorParseError
from core.models import FolderOverrides, ImageRecord, PreviousDescriptor
from core.services.interfaces import IndexReport
from core.services.tree_builder import TreeBuilder, is_image_filename


@pytest.fixture
def config_provider() -> MagicMock:
    provider = MagicMock()
    provider.load.return_value = FolderOverrides(title="Configured")
    return provider


@pytest.fixture
def descriptors() -> MagicMock:
    repo = MagicMock()
    repo.load_previous.return_value = PreviousDescriptor(
        images={"a.jpg": ImageRecord("a.jpg", 10, 20)}
    )
    return repo


@pytest.mark.parametrize(
    "name, expected",
    [
        ("a.jpg", True),
        ("B.JPG", True),
        ("c.JpEg", True),
        ("d.png", False),
        ("jpg", False),
        ("e.jpg.txt", False),
    ],
)
def test_is_image_filename(name: str, expected: bool) -> None:
    assert is_image_filename(name) is expected


def test_build_raises_on_missing_root(tmp_path: Path, config_provider, descriptors) -> None:
    with pytest.raises(PathNotFound):
        TreeBuilder(config_provider, descriptors).build(tmp_path / "nope")


def test_build_raises_when_root_is_a_file(tmp_path: Path, config_provider, descriptors) -> None:
    file_path = tmp_path / "file.jpg"
    file_path.write_text("x")

    with pytest.raises(PathNotFound):
        TreeBuilder(config_provider, descriptors).build(file_path)


def test_build_classifies_entries(tmp_path: Path, config_provider, descriptors) -> None:
    root = make_tree(
        tmp_path / "root",
        {
            "b.jpg": "x",
            "A.JPEG": "x",
            "notes.txt": "x",
            ".hidden.jpg": "x",
            ".hidden_dir": {"c.jpg": "x"},
            ".thumbs": {"150-b.jpg": "x"},
            "2015_zeta": {"z.jpg": "x"},
            "2014_alpha": {},
        },
    )

    node = TreeBuilder(config_provider, descriptors).build(root)

    assert node.path == root
    assert node.name == "root"
    assert sorted(node.image_filenames) == ["A.JPEG", "b.jpg"]
    assert [child.name for child in node.children] == ["2014_alpha", "2015_zeta"]
    assert node.children[1].image_filenames == ["z.jpg"]
    assert node.overrides is None
    assert node.previous_images is None
    config_provider.load.assert_not_called()
    descriptors.load_previous.assert_not_called()


def test_image_filenames_follow_listing_order(tmp_path: Path, config_provider, descriptors) -> None:
    root = make_tree(tmp_path / "root", {"c.jpg": "x", "a.jpg": "x", "b.jpg": "x"})
    listing = [name for name in os.listdir(root) if name.endswith(".jpg")]

    node = TreeBuilder(config_provider, descriptors).build(root)

    assert node.image_filenames == listing


def test_build_loads_config_and_previous(tmp_path: Path, config_provider, descriptors) -> None:
    root = make_tree(tmp_path / "root", {"a.jpg": "x", "folder.ini": "", "meta.json": "{}"})

    node = TreeBuilder(config_provider, descriptors).build(root)

    assert node.overrides == FolderOverrides(title="Configured")
    assert node.previous_images == {"a.jpg": ImageRecord("a.jpg", 10, 20)}
    config_provider.load.assert_called_once_with(root / "folder.ini")
    descriptors.load_previous.assert_called_once_with(root / "meta.json")


def test_build_skips_previous_when_reuse_disabled(
    tmp_path: Path, config_provider, descriptors
) -> None:
    root = make_tree(tmp_path / "root", {"a.jpg": "x", "meta.json": "{}"})

    node = TreeBuilder(config_provider, descriptors, reuse_previous=False).build(root)

    assert node.previous_images is None
    descriptors.load_previous.assert_not_called()


def test_config_error_is_a_warning(tmp_path: Path, config_provider, descriptors) -> None:
    config_provider.load.side_effect = ConfigParseError("bad line")
    root = make_tree(tmp_path / "root", {"folder.ini": "garbage"})
    report = IndexReport()

    node = TreeBuilder(config_provider, descriptors, report=report).build(root)

    assert node.overrides is None
    assert len(report.warnings) == 1
    assert "bad line" in report.warnings[0]


def test_previous_descriptor_error_is_a_warning(
    tmp_path: Path, config_provider, descriptors
) -> None:
    descriptors.load_previous.side_effect = PreviousDescriptorParseError("not json")
    root = make_tree(tmp_path / "root", {"a.jpg": "x", "meta.json": "{"})
    report = IndexReport()

    node = TreeBuilder(config_provider, descriptors, report=report).build(root)

    assert node.previous_images is None
    assert report.warnings == [f"Ignoring previous descriptor {root / 'meta.json'}: not json"]


def test_custom_file_names(tmp_path: Path, config_provider, descriptors) -> None:
    root = make_tree(
        tmp_path / "root",
        {"album.cfg": "", "index.json": "{}", "thumbs": {"150-a.jpg": "x"}, "a.jpg": "x"},
    )

    node = TreeBuilder(
        config_provider,
        descriptors,
        config_filename="album.cfg",
        descriptor_filename="index.json",
        thumb_dir_name="thumbs",
    ).build(root)

    assert node.children == []
    assert node.overrides is not None
    assert node.previous_images is not None


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unavailable")
def test_symlinked_directories_are_not_followed(
    tmp_path: Path, config_provider, descriptors
) -> None:
    root = make_tree(tmp_path / "root", {"real": {"a.jpg": "x"}})
    try:
        os.symlink(root, root / "real" / "loop", target_is_directory=True)
    except OSError:
        pytest.skip("cannot create symlink")

    node = TreeBuilder(config_provider, descriptors).build(root)

    assert [child.name for child in node.children] == ["real"]
    assert node.children[0].children == []
