from pathlib import Path

import pytest
from starlette.exceptions import HTTPException
from starlette.testclient import TestClient

from statickit.config import ProjectLayout, StaticKitConfig, TemplateSettings
from statickit.runtime.app import CLIENT_SCRIPT_URL, StaticKitApp, build_sections, create_app


def write(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def project(tmp_path):
    src = tmp_path / "src"
    write(src / "pages" / "index.html", "<main><!-- @import: @components/header.html --></main>")
    write(src / "pages" / "blog" / "post.html", "<article>Post</article>")
    write(src / "pages" / "loop.html", "<!-- @import: loop.html -->")
    write(src / "components" / "header.html", "<header>Site</header>")
    write(src / "styles" / "main.css", "body { margin: 0; }")
    write(src / "js" / "index.js", "console.log('hi')")
    write(tmp_path / "public" / "images" / "sprite.svg", "<svg></svg>")
    write(tmp_path / "public" / "robots.txt", "User-agent: *")
    return tmp_path


@pytest.fixture
def app(project):
    config = StaticKitConfig(templates=TemplateSettings(language="fr"))
    return StaticKitApp(ProjectLayout.from_root(project), config)


@pytest.fixture
def client(app):
    return TestClient(app)


def test_index_lists_pages_and_components(client):
    response = client.get("/")

    assert response.status_code == 200
    body = response.text
    assert 'href="/pages/index"' in body
    assert 'href="/pages/blog/post"' in body
    assert 'href="/components/header"' in body
    assert "pages/blog/" in body
    assert CLIENT_SCRIPT_URL in body


def test_index_for_empty_project(tmp_path):
    client = TestClient(StaticKitApp(ProjectLayout.from_root(tmp_path)))
    response = client.get("/")

    assert response.status_code == 200
    assert "No pages or components found." in response.text


def test_page_is_expanded_and_wrapped(client):
    response = client.get("/pages/index")

    assert response.status_code == 200
    body = response.text
    assert "<main><header>Site</header></main>" in body
    assert '<html lang="fr">' in body
    assert '<link rel="stylesheet" href="/src/styles/main.css">' in body
    assert '<script type="module" src="/src/js/index.js"></script>' in body
    assert 'data-sprite="/images/sprite.svg"' in body


def test_nested_page(client):
    response = client.get("/pages/blog/post")
    assert response.status_code == 200
    assert "<article>Post</article>" in response.text
    assert "<title>blog/post</title>" in response.text


def test_component_preview(client):
    response = client.get("/components/header")
    assert response.status_code == 200
    assert "<header>Site</header>" in response.text
    assert "<title>component: header</title>" in response.text


def test_circular_page_renders_diagnostic(client):
    response = client.get("/pages/loop")
    assert response.status_code == 200
    assert "Circular import detected" in response.text


def test_unknown_page_is_404(client):
    assert client.get("/pages/nope").status_code == 404
    assert client.get("/components/nope").status_code == 404


def test_client_script_is_served(client):
    response = client.get(CLIENT_SCRIPT_URL)
    assert response.status_code == 200
    assert "full-reload" in response.text
    assert "svg-sprite-updated" in response.text


def test_public_files_and_sources_are_served(client):
    sprite = client.get("/images/sprite.svg")
    assert sprite.status_code == 200
    assert sprite.text == "<svg></svg>"

    assert client.get("/robots.txt").text == "User-agent: *"
    assert client.get("/src/styles/main.css").text == "body { margin: 0; }"


def test_find_source_stays_inside_directory(app, project):
    pages = project / "src" / "pages"
    write(project / "src" / "secret.html", "secret")

    with pytest.raises(HTTPException) as exc:
        app._find_source(pages, "../secret")
    assert exc.value.status_code == 404

    with pytest.raises(HTTPException):
        app._find_source(pages, "/")

    assert app._find_source(pages, "blog/post") == (pages / "blog" / "post.html").resolve()


def test_build_sections_groups_by_directory():
    sections = build_sections(["b", "docs/intro", "a", "blog/post", "docs/api"], "pages", "/pages")

    assert [section.title for section in sections] == ["Pages", "pages/blog/", "pages/docs/"]
    assert [entry.name for entry in sections[0].entries] == ["a", "b"]
    assert [entry.label for entry in sections[2].entries] == ["api", "intro"]
    assert sections[2].entries[0].name == "docs/api"


def test_build_sections_without_top_level_entries():
    sections = build_sections(["ui/button"], "components", "/components")
    assert [section.title for section in sections] == ["components/ui/"]


def test_create_app_reads_project_config(project):
    write(project / "static-kit.config.json", '{"templates": {"language": "de"}}')

    client = TestClient(create_app(project))
    assert '<html lang="de">' in client.get("/pages/blog/post").text
