from pathlib import Path

import pytest

from kvprovider.workspace import (
    DEFAULT_PROVIDERS,
    ProviderSource,
    TfVarFile,
    add_file_to_all_directories,
    add_versions_files,
    assets_dir,
    render_versions_file,
    unpack,
    write_var_files,
)


@pytest.fixture
def assets(tmp_path):
    root = tmp_path / "assets"
    (root / "datavolume" / "modules").mkdir(parents=True)
    (root / "datavolume" / "main.tf").write_text("resource {}\n")
    (root / "datavolume" / "modules" / "variables.tf").write_text("variable x {}\n")
    return root


def test_assets_dir_default_and_override(tmp_path):
    assert assets_dir({}) == Path("../terraform/data")
    assert assets_dir({"OPENSHIFT_INSTALL_DATA": ""}) == Path("../terraform/data")
    assert assets_dir({"OPENSHIFT_INSTALL_DATA": str(tmp_path)}) == tmp_path


def test_unpack_copies_directory_tree(assets, tmp_path):
    work = tmp_path / "work"
    unpack(work, "datavolume", assets)
    assert (work / "main.tf").read_text() == "resource {}\n"
    assert (work / "modules" / "variables.tf").read_text() == "variable x {}\n"


def test_unpack_single_file_and_rooted_uri(assets, tmp_path):
    target = tmp_path / "copy.tf"
    unpack(target, "/datavolume/main.tf", assets)
    assert target.read_text() == "resource {}\n"


def test_unpack_into_existing_directory(assets, tmp_path):
    work = tmp_path / "work"
    work.mkdir()
    unpack(work, "datavolume", assets)
    assert sorted(p.name for p in work.iterdir()) == ["main.tf", "modules"]


def test_unpack_missing_asset_raises(assets, tmp_path):
    with pytest.raises(FileNotFoundError):
        unpack(tmp_path / "out", "nothing-here", assets)


def test_render_versions_file_default():
    expected = (
        "terraform {\n"
        '  required_version = ">= 1.0.0"\n'
        "  required_providers {\n"
        "    kubevirt = {\n"
        '      source = "terraform.local/local/kubevirt"\n'
        "    }\n"
        "  }\n"
        "}\n"
    )
    assert render_versions_file(DEFAULT_PROVIDERS) == expected


def test_render_versions_file_escapes_values():
    text = render_versions_file([ProviderSource("a<b", "x/y")])
    assert "a&lt;b = {" in text
    assert "<" not in text.replace(">= 1.0.0", "")


def test_render_versions_file_lists_every_provider():
    providers = [ProviderSource("one", "src/one"), ProviderSource("two", "src/two")]
    text = render_versions_file(providers)
    assert text.index("one = {") < text.index("two = {")
    assert text.count("source = ") == 2


def test_add_file_to_all_directories(tmp_path):
    (tmp_path / "a" / "b").mkdir(parents=True)
    (tmp_path / "c").mkdir()
    add_file_to_all_directories("marker.txt", b"data", tmp_path)
    for directory in (tmp_path, tmp_path / "a", tmp_path / "a" / "b", tmp_path / "c"):
        assert (directory / "marker.txt").read_bytes() == b"data"


def test_add_versions_files(tmp_path):
    (tmp_path / "nested").mkdir()
    add_versions_files(tmp_path)
    expected = render_versions_file(DEFAULT_PROVIDERS)
    assert (tmp_path / "versions.tf").read_text() == expected
    assert (tmp_path / "nested" / "versions.tf").read_text() == expected


def test_write_var_files(tmp_path):
    files = [
        TfVarFile("terraform.auto.tfvars.json", b'{"namespace": "ns"}'),
        TfVarFile("extra.tfvars", b"a = 1\n"),
    ]
    paths = write_var_files(tmp_path, files)
    assert paths == [tmp_path / "terraform.auto.tfvars.json", tmp_path / "extra.tfvars"]
    assert [p.read_bytes() for p in paths] == [f.data for f in files]


def test_write_var_files_overwrites(tmp_path):
    write_var_files(tmp_path, [TfVarFile("v.json", b"long original content")])
    (path,) = write_var_files(tmp_path, [TfVarFile("v.json", b"new")])
    assert path.read_bytes() == b"new"