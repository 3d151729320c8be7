from statickit.scanner import list_pages, scan_directory


def test_scan_directory_finds_nested_files_sorted(tmp_path):
    for name in ["b.svg", "a/z.svg", "a/c.svg", "notes.txt"]:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("x")

    assert scan_directory(tmp_path, [".svg"]) == ["a/c.svg", "a/z.svg", "b.svg"]


def test_scan_directory_multiple_extensions(tmp_path):
    (tmp_path / "app.js").write_text("")
    (tmp_path / "types.ts").write_text("")
    (tmp_path / "style.css").write_text("")

    assert scan_directory(tmp_path, [".js", ".ts"]) == ["app.js", "types.ts"]


def test_scan_directory_skips_node_modules(tmp_path):
    (tmp_path / "node_modules" / "lib").mkdir(parents=True)
    (tmp_path / "node_modules" / "lib" / "icon.svg").write_text("")
    (tmp_path / "icon.svg").write_text("")

    assert scan_directory(tmp_path, [".svg"]) == ["icon.svg"]


def test_scan_directory_ignores_directories_with_matching_names(tmp_path):
    (tmp_path / "weird.svg").mkdir()
    assert scan_directory(tmp_path, [".svg"]) == []


def test_scan_missing_directory_returns_empty(tmp_path):
    assert scan_directory(tmp_path / "missing", [".svg"]) == []


def test_list_pages_strips_extension(tmp_path):
    (tmp_path / "blog").mkdir()
    (tmp_path / "index.html").write_text("")
    (tmp_path / "blog" / "post.html").write_text("")

    assert list_pages(tmp_path) == ["blog/post", "index"]
